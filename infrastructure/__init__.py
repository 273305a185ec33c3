# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Infrastructure - Failure isolation for upstream calls
# PURPOSE: Circuit breaker, timeout and retry shared by every adapter
# CREATED: 16 SEP 2026
# ============================================================================
"""
Infrastructure module for the Ingot client boundary.

Provides:
- CircuitBreaker: Per-upstream three-state breaker
- RetryPolicy: Linear backoff for idempotent reads
- ResilientCaller: Timeout + retry + breaker around a single adapter call

Usage:
    from infrastructure import CircuitBreaker, ResilientCaller, RetryPolicy

    breaker = CircuitBreaker("anvil", failure_threshold=5)
    caller = ResilientCaller("anvil", breaker, RetryPolicy(), timeout_seconds=5.0)
    stats = caller.call("get_queue_stats", adapter.get_queue_stats, "queue-1")
"""

from infrastructure.circuit_breaker import CircuitBreaker
from infrastructure.resilience import ResilientCaller, RetryPolicy

__all__ = [
    "CircuitBreaker",
    "ResilientCaller",
    "RetryPolicy",
]
