"""Thread-safe per-model token accounting for the current session."""

from __future__ import annotations

import threading

from stealthassist.models import ModelUsage, TokenUsage


class UsageTracker:
    """Accumulates vendor-reported token usage per provider/model.

    In-memory only; quota counters live in UsageGovernor.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._usages: dict[str, ModelUsage] = {}

    def record(self, provider: str, model: str, usage: TokenUsage) -> None:
        """Record a single call's token usage."""
        key = f"{provider}/{model}"
        with self._lock:
            if key not in self._usages:
                self._usages[key] = ModelUsage(provider=provider, model=model)
            mu = self._usages[key]
            mu.prompt_tokens += usage.prompt_tokens
            mu.completion_tokens += usage.completion_tokens
            mu.total_tokens += usage.total_tokens
            mu.call_count += usage.call_count

    @property
    def model_usages(self) -> dict[str, ModelUsage]:
        """Snapshot of per-model usage."""
        with self._lock:
            return dict(self._usages)

    @property
    def total_usage(self) -> TokenUsage:
        with self._lock:
            total = TokenUsage()
            for mu in self._usages.values():
                total = total + TokenUsage(
                    prompt_tokens=mu.prompt_tokens,
                    completion_tokens=mu.completion_tokens,
                    total_tokens=mu.total_tokens,
                    call_count=mu.call_count,
                )
            return total

    def format_report(self) -> str:
        """Human-readable session token report."""
        with self._lock:
            usages = list(self._usages.values())

        if not usages:
            return "No LLM usage recorded."

        lines = ["Session token usage:"]
        for mu in usages:
            calls_str = f"{mu.call_count} call{'s' if mu.call_count != 1 else ''}"
            lines.append(
                f"  {mu.provider} / {mu.model}: {calls_str}, "
                f"{mu.prompt_tokens:,}+{mu.completion_tokens:,}={mu.total_tokens:,} tokens"
            )

        if len(usages) > 1:
            total = self.total_usage
            calls_str = f"{total.call_count} call{'s' if total.call_count != 1 else ''}"
            lines.append("  " + "─" * 50)
            lines.append(
                f"  Total: {calls_str}, "
                f"{total.prompt_tokens:,}+{total.completion_tokens:,}={total.total_tokens:,} tokens"
            )
        return "\n".join(lines)
