# -*- coding: utf-8 -*-
"""DPoP (proof-of-possession) JWT signer for the Mercari web API.

Mercari's web app authenticates search calls with a DPoP header: a compact
JWT signed with ES256 whose header carries the public key as a JWK, so the
server needs no prior key registration. One P-256 keypair is generated per
signer and every request gets a fresh token.
"""

from __future__ import annotations

import base64
import json
import time
import uuid
from typing import Any, Callable

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from mercari_deal_hunter.exceptions import SigningError

# P-256 coordinates and signature components are 32 bytes each.
COORDINATE_SIZE = 32


def b64url(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def pad_to_32(value: int) -> bytes:
    """Big-endian bytes of value, left-padded with zeros to 32 bytes."""
    return value.to_bytes(COORDINATE_SIZE, "big")


def _compact_json(obj: dict[str, Any]) -> bytes:
    return json.dumps(obj, separators=(",", ":")).encode("utf-8")


class DPoPSigner:
    """Builds single-use DPoP tokens bound to an HTTP method and URL."""

    ALGORITHM = "ES256"
    TOKEN_TYPE = "dpop+jwt"

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Generate the process keypair.

        Raises:
            SigningError: If the key cannot be generated.
        """
        try:
            self._private_key = ec.generate_private_key(ec.SECP256R1())
        except (UnsupportedAlgorithm, ValueError) as exc:
            raise SigningError(f"failed to generate ECDSA P-256 key: {exc}") from exc
        self._clock = clock
        numbers = self._private_key.public_key().public_numbers()
        self._jwk = {
            "crv": "P-256",
            "kty": "EC",
            "x": b64url(pad_to_32(numbers.x)),
            "y": b64url(pad_to_32(numbers.y)),
        }

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._private_key.public_key()

    @property
    def jwk(self) -> dict[str, str]:
        """Public key as embedded in every token header."""
        return dict(self._jwk)

    def sign(self, url: str, method: str) -> str:
        """Return a fresh DPoP token for `method url`.

        Raises:
            SigningError: If signing fails.
        """
        header = {"typ": self.TOKEN_TYPE, "alg": self.ALGORITHM, "jwk": self._jwk}
        payload = {
            "iat": int(self._clock()),
            "jti": str(uuid.uuid4()),
            "htu": url,
            "htm": method.upper(),
            "uuid": str(uuid.uuid4()),
        }
        signing_input = f"{b64url(_compact_json(header))}.{b64url(_compact_json(payload))}"
        try:
            der = self._private_key.sign(
                signing_input.encode("ascii"),
                ec.ECDSA(hashes.SHA256()),
            )
        except (UnsupportedAlgorithm, ValueError) as exc:
            raise SigningError(f"ecdsa sign failed: {exc}") from exc
        r, s = decode_dss_signature(der)
        signature = pad_to_32(r) + pad_to_32(s)
        return f"{signing_input}.{b64url(signature)}"
