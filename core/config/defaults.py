# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Default resilience values
# PURPOSE: Centralized defaults for timeouts, retries, circuit breaking
# CREATED: 15 SEP 2026
# ============================================================================
"""
Configuration Defaults

Sensible defaults for the resilience policy applied to every upstream
call. Overridable via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Fail fast on nonsense values
"""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class ResilienceDefaults:
    """
    Defaults for the resilience wrapper.

    One instance is shared by both upstreams unless overridden per client.
    """
    # Timeout (seconds) bounding every adapter call
    timeout_seconds: float = 5.0

    # Retry (idempotent reads only, timeout/network only)
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.2  # delay = base * attempt_number

    # Circuit breaker (per upstream)
    breaker_failure_threshold: int = 5
    breaker_window_seconds: float = 60.0
    breaker_cooldown_seconds: float = 30.0

    # Worker threads enforcing the timeout
    max_workers: int = 16

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.retry_max_attempts < 1:
            raise ValueError("retry_max_attempts must be >= 1")
        if self.retry_base_delay_seconds < 0:
            raise ValueError("retry_base_delay_seconds must be >= 0")
        if self.breaker_failure_threshold < 1:
            raise ValueError("breaker_failure_threshold must be >= 1")
        if self.breaker_window_seconds <= 0 or self.breaker_cooldown_seconds < 0:
            raise ValueError("breaker window must be positive and cool-down non-negative")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    @classmethod
    def from_env(cls) -> "ResilienceDefaults":
        """Create from environment variables."""
        return cls(
            timeout_seconds=_env_float("CLIENT_TIMEOUT_SECONDS", 5.0),
            retry_max_attempts=_env_int("CLIENT_RETRY_MAX_ATTEMPTS", 3),
            retry_base_delay_seconds=_env_float("CLIENT_RETRY_BASE_DELAY_SECONDS", 0.2),
            breaker_failure_threshold=_env_int("BREAKER_FAILURE_THRESHOLD", 5),
            breaker_window_seconds=_env_float("BREAKER_WINDOW_SECONDS", 60.0),
            breaker_cooldown_seconds=_env_float("BREAKER_COOLDOWN_SECONDS", 30.0),
            max_workers=_env_int("CLIENT_MAX_WORKERS", 16),
        )


__all__ = ["ResilienceDefaults"]
