"""Usage-header driven throttle that backs off before Meta's hard rate limits."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping

from ..logging import get_logger

logger = get_logger(__name__)

APP_USAGE_HEADER = "x-app-usage"
BUSINESS_USAGE_HEADER = "x-business-use-case-usage"

THROTTLE_START = 75.0
THROTTLE_HARD = 95.0


def throttle_delay_ms(usage: float) -> int:
    """Delay in milliseconds to apply before a request at ``usage`` percent."""

    if usage < THROTTLE_START:
        return 0
    if usage < THROTTLE_HARD:
        ratio = (usage - THROTTLE_START) / (THROTTLE_HARD - THROTTLE_START)
        return round(100 + ratio * 1900)
    ratio = min((usage - THROTTLE_HARD) / 5, 1.0)
    return round(5000 + ratio * 55000)


def _max_metric(entry: Mapping[str, Any]) -> float:
    values = [
        float(value)
        for value in entry.values()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    ]
    return max(values, default=0.0)


class UsageTracker:
    """Tracks the latest app and business-use-case usage reported by Meta.

    Values reflect the last response that carried the header; responses
    without it (or with unparseable JSON) leave the previous value in place.
    """

    def __init__(self) -> None:
        self.app_usage = 0.0
        self.business_usage = 0.0

    def update(self, headers: Mapping[str, str]) -> None:
        app_raw = headers.get(APP_USAGE_HEADER)
        if app_raw:
            try:
                payload = json.loads(app_raw)
            except json.JSONDecodeError:
                payload = None
            if isinstance(payload, dict):
                self.app_usage = _max_metric(payload)

        business_raw = headers.get(BUSINESS_USAGE_HEADER)
        if business_raw:
            try:
                payload = json.loads(business_raw)
            except json.JSONDecodeError:
                payload = None
            if isinstance(payload, dict):
                peak = 0.0
                for entries in payload.values():
                    if not isinstance(entries, list):
                        continue
                    for entry in entries:
                        if isinstance(entry, dict):
                            peak = max(peak, _max_metric(entry))
                self.business_usage = peak

    @property
    def current_usage(self) -> float:
        return max(self.app_usage, self.business_usage)

    def delay_ms(self) -> int:
        return throttle_delay_ms(self.current_usage)

    async def wait_if_needed(self) -> int:
        delay = self.delay_ms()
        if delay > 0:
            logger.warning("rate_limit_throttling", delay_ms=delay, **self.snapshot())
            await asyncio.sleep(delay / 1000)
        return delay

    def snapshot(self) -> dict[str, float]:
        return {
            "app_usage": self.app_usage,
            "business_usage": self.business_usage,
            "current_usage": self.current_usage,
        }


__all__ = [
    "APP_USAGE_HEADER",
    "BUSINESS_USAGE_HEADER",
    "UsageTracker",
    "throttle_delay_ms",
]
