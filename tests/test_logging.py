from __future__ import annotations

import logging

from meta_ads_mcp.logging import REDACTED, configure_logging, redact_secrets


def test_redact_secrets_hides_raw_tokens() -> None:
    event = {"event": "token_registered", "access_token": "EAAB-secret", "masked_token": "EAAB-secre..."}

    result = redact_secrets(None, "info", event)

    assert result["access_token"] == REDACTED
    assert result["masked_token"] == "EAAB-secre..."


def test_redact_secrets_leaves_empty_values() -> None:
    assert redact_secrets(None, "info", {"event": "x", "token": None}) == {"event": "x", "token": None}


def test_configure_logging_quiets_httpx() -> None:
    configure_logging("debug")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
