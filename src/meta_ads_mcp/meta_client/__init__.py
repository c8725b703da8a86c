"""Resilient access layer for the Meta Graph API."""

from __future__ import annotations

from .classifier import classify, classify_http, is_retryable, is_vendor_error
from .client import BackoffStrategy, MetaAdsApiClient, PendingRequest, encode_params, is_absolute_url
from .credentials import (
    CredentialRegistry,
    CredentialResolver,
    TokenListing,
    credential_override,
    current_override,
    mask_token,
)
from .paginator import after_cursor, collect_pages, has_next_page
from .throttle import UsageTracker, throttle_delay_ms

__all__ = [
    "BackoffStrategy",
    "CredentialRegistry",
    "CredentialResolver",
    "MetaAdsApiClient",
    "PendingRequest",
    "TokenListing",
    "UsageTracker",
    "after_cursor",
    "classify",
    "classify_http",
    "collect_pages",
    "credential_override",
    "current_override",
    "encode_params",
    "has_next_page",
    "is_absolute_url",
    "is_retryable",
    "is_vendor_error",
    "mask_token",
    "throttle_delay_ms",
]
