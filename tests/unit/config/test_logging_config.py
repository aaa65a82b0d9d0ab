# -*- coding: utf-8 -*-
"""Unit tests for the logging processors."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace

from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.logging.config import _service_context_processor, redact_secrets


def test_redact_secrets_masks_credential_fields() -> None:
    event = {"event": "x", "api_key": "hf_abcdefghijkl", "brand": "Prada"}

    out = redact_secrets(None, "info", event)

    assert out["api_key"] != "hf_abcdefghijkl"
    assert out["brand"] == "Prada"


def test_service_context_adds_logger_and_app(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory(app={"service_name": "hunter", "environment": "test"})
    processor = _service_context_processor(settings)
    logger = SimpleNamespace(_logger=SimpleNamespace(name="ScanCycle"))

    out = processor(logger, "info", {"event": "x"})

    assert out["logger"] == "ScanCycle"
    assert out["service_name"] == "hunter"
    assert out["environment"] == "test"
    assert "service_version" not in out
