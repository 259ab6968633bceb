"""Per-provider daily/monthly quota enforcement tied to the subscription tier."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from stealthassist.exceptions import QuotaExceededError
from stealthassist.infra.settings_store import SettingsStore
from stealthassist.models import TIER_LIMITS, ProviderId, SubscriptionTier, UsageRecord

logger = logging.getLogger(__name__)

USAGE_KEY = "usage"


def day_key(now: datetime) -> str:
    """Local calendar date, e.g. '2025-02-16'."""
    return now.strftime("%Y-%m-%d")


def month_key(now: datetime) -> str:
    """Year-month, e.g. '2025-02'."""
    return now.strftime("%Y-%m")


def _roll_over(record: UsageRecord, now: datetime) -> UsageRecord:
    """Zero the counters whose calendar key is stale and stamp the current keys.

    Day and month are checked independently.
    """
    today = day_key(now)
    this_month = month_key(now)
    rolled = UsageRecord(
        daily=record.daily,
        monthly=record.monthly,
        last_daily_key=record.last_daily_key,
        last_monthly_key=record.last_monthly_key,
    )
    if rolled.last_daily_key != today:
        rolled.daily = 0
        rolled.last_daily_key = today
    if rolled.last_monthly_key != this_month:
        rolled.monthly = 0
        rolled.last_monthly_key = this_month
    return rolled


class UsageGovernor:
    """Gate before a provider call, commit after a successful one.

    Usage:
        governor.check_limit(ProviderId.CLAUDE, tier)   # raises QuotaExceededError
        ... provider call ...
        governor.record_usage(ProviderId.CLAUDE)

    Each provider's record is read-modified-written under its own lock.
    """

    def __init__(
        self,
        store: SettingsStore,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._clock = clock
        self._locks = {provider: threading.Lock() for provider in ProviderId}

    def _stored_record(self, provider: ProviderId) -> UsageRecord:
        usage = self._store.get(USAGE_KEY, {})
        return UsageRecord.from_dict(usage.get(provider.value))

    def get_record(self, provider: ProviderId) -> UsageRecord:
        """Effective counters for now: stale counters read as zero. Does not persist."""
        with self._locks[provider]:
            return _roll_over(self._stored_record(provider), self._clock())

    def check_limit(self, provider: ProviderId, tier: SubscriptionTier) -> None:
        """Raise QuotaExceededError if another call would exceed the tier's limits."""
        limits = TIER_LIMITS[tier]
        record = self.get_record(provider)

        if limits.daily is not None and record.daily >= limits.daily:
            logger.info(
                "Quota blocked: provider=%s tier=%s daily=%d/%d",
                provider.value,
                tier.value,
                record.daily,
                limits.daily,
            )
            raise QuotaExceededError(provider.value, "daily", limits.daily)
        if limits.monthly is not None and record.monthly >= limits.monthly:
            logger.info(
                "Quota blocked: provider=%s tier=%s monthly=%d/%d",
                provider.value,
                tier.value,
                record.monthly,
                limits.monthly,
            )
            raise QuotaExceededError(provider.value, "monthly", limits.monthly)

        logger.debug(
            "Quota ok: provider=%s tier=%s daily=%d monthly=%d",
            provider.value,
            tier.value,
            record.daily,
            record.monthly,
        )

    def record_usage(self, provider: ProviderId) -> UsageRecord:
        """Reset stale counters, increment both by one, persist the usage mapping."""
        with self._locks[provider]:
            now = self._clock()
            result: dict = {}

            def _increment(usage: dict) -> dict:
                record = _roll_over(UsageRecord.from_dict(usage.get(provider.value)), now)
                record.daily += 1
                record.monthly += 1
                usage[provider.value] = record.to_dict()
                result["record"] = record
                return usage

            self._store.update(USAGE_KEY, _increment, default={})

        record = result["record"]
        logger.debug(
            "Usage recorded: provider=%s daily=%d monthly=%d",
            provider.value,
            record.daily,
            record.monthly,
        )
        return record

    def snapshot(self) -> dict[ProviderId, UsageRecord]:
        """Effective records for every provider."""
        return {provider: self.get_record(provider) for provider in ProviderId}
