# ============================================================================
# VERSION - INGOT CLIENT BOUNDARY
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# ============================================================================
"""
Version information for the Ingot client boundary.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch
# Criteria for 0.3 - breaker + component registry wired into health
__version__ = "0.3.1"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-18"

EPOCH = 2
CODENAME = "Resilient Clients"
