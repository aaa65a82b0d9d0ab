# -*- coding: utf-8 -*-
"""Unit tests for DPoPSigner."""

from __future__ import annotations

import base64
import json
import uuid
from typing import Any

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from mercari_deal_hunter.clients.mercari.dpop import DPoPSigner, b64url, pad_to_32

SEARCH_URL = "https://api.mercari.jp/v2/entities:search"


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _segments(token: str) -> tuple[dict[str, Any], dict[str, Any], bytes]:
    header, payload, signature = token.split(".")
    return (
        json.loads(_b64url_decode(header)),
        json.loads(_b64url_decode(payload)),
        _b64url_decode(signature),
    )


def test_token_has_three_segments_without_padding() -> None:
    token = DPoPSigner().sign(SEARCH_URL, "POST")
    parts = token.split(".")
    assert len(parts) == 3
    assert all("=" not in p for p in parts)


def test_header_embeds_p256_public_key() -> None:
    signer = DPoPSigner()
    header, _, _ = _segments(signer.sign(SEARCH_URL, "POST"))

    assert header["typ"] == "dpop+jwt"
    assert header["alg"] == "ES256"
    assert header["jwk"]["kty"] == "EC"
    assert header["jwk"]["crv"] == "P-256"
    assert len(_b64url_decode(header["jwk"]["x"])) == 32
    assert len(_b64url_decode(header["jwk"]["y"])) == 32
    assert header["jwk"] == signer.jwk


def test_payload_binds_method_and_url_with_fresh_nonces() -> None:
    signer = DPoPSigner(clock=lambda: 1_700_000_000.7)
    _, first, _ = _segments(signer.sign(SEARCH_URL, "post"))
    _, second, _ = _segments(signer.sign(SEARCH_URL, "POST"))

    assert first["htu"] == SEARCH_URL
    assert first["htm"] == "POST"
    assert first["iat"] == 1_700_000_000
    for claims in (first, second):
        assert uuid.UUID(claims["jti"]).version == 4
        assert uuid.UUID(claims["uuid"]).version == 4
    assert first["jti"] != second["jti"]
    assert first["uuid"] != second["uuid"]


def test_signature_verifies_against_embedded_jwk() -> None:
    signer = DPoPSigner()
    token = signer.sign(SEARCH_URL, "POST")
    header, _, raw_signature = _segments(token)
    assert len(raw_signature) == 64

    x = int.from_bytes(_b64url_decode(header["jwk"]["x"]), "big")
    y = int.from_bytes(_b64url_decode(header["jwk"]["y"]), "big")
    public_key = ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1()).public_key()
    r = int.from_bytes(raw_signature[:32], "big")
    s = int.from_bytes(raw_signature[32:], "big")
    signing_input = token.rsplit(".", 1)[0].encode("ascii")

    public_key.verify(encode_dss_signature(r, s), signing_input, ec.ECDSA(hashes.SHA256()))


def test_keypair_is_stable_per_signer_and_distinct_across_signers() -> None:
    signer = DPoPSigner()
    h1, _, _ = _segments(signer.sign(SEARCH_URL, "POST"))
    h2, _, _ = _segments(signer.sign(SEARCH_URL, "POST"))
    other, _, _ = _segments(DPoPSigner().sign(SEARCH_URL, "POST"))

    assert h1["jwk"] == h2["jwk"]
    assert other["jwk"] != h1["jwk"]


@pytest.mark.parametrize("value", [0, 1, 2**255])
def test_pad_to_32_left_pads_big_endian(value: int) -> None:
    padded = pad_to_32(value)
    assert len(padded) == 32
    assert int.from_bytes(padded, "big") == value


def test_b64url_strips_padding() -> None:
    assert b64url(b"\xff\xfe") == "__4"
