# ============================================================================
# CLIENTS MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Upstream facades and adapters
# PURPOSE: Single entry point for talking to Forge and Anvil
# CREATED: 17 SEP 2026
# ============================================================================
"""
Clients Module

Application code uses SampleClient (Forge) and QueueClient (Anvil) only.
Adapters are chosen by configuration and never imported directly by
callers.
"""

from clients.base import QueueAdapter, SampleAdapter
from clients.facade import ClientFacade
from clients.sample_client import SampleClient
from clients.queue_client import QueueClient

__all__ = [
    "SampleAdapter",
    "QueueAdapter",
    "ClientFacade",
    "SampleClient",
    "QueueClient",
]
