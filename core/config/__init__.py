# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 15 SEP 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the client boundary.
"""

from core.config.defaults import ResilienceDefaults
from core.config.settings import ClientConfig, get_config, reset_config

__all__ = [
    "ResilienceDefaults",
    "ClientConfig",
    "get_config",
    "reset_config",
]
