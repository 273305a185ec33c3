# ============================================================================
# FORGE CLIENT FACADE
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Stable Forge interface for application code
# PURPOSE: Samples and artifacts behind timeout / retry / breaker
# CREATED: 19 SEP 2026
# ============================================================================
"""
SampleClient

Usage:
    from clients import SampleClient

    forge = SampleClient.from_config()
    sample = forge.get_sample("test-123")
"""

from typing import List, Optional

from core.config import ClientConfig, get_config
from core.contracts import UpstreamName
from core.models import Artifact, Sample
from clients.adapters import create_sample_adapter
from clients.base import SampleAdapter
from clients.facade import ClientFacade
from infrastructure import CircuitBreaker


class SampleClient(ClientFacade):
    """Forge facade."""

    upstream = UpstreamName.FORGE

    def __init__(self, adapter: SampleAdapter, **kwargs):
        super().__init__(adapter, **kwargs)

    @classmethod
    def from_config(
        cls,
        config: Optional[ClientConfig] = None,
        breaker: Optional[CircuitBreaker] = None,
    ) -> "SampleClient":
        """Build with the adapter and resilience policy named by config."""
        config = config or get_config()
        return cls(create_sample_adapter(config), breaker=breaker, resilience=config.resilience)

    def get_sample(self, sample_id: str, tenant_id: Optional[str] = None) -> Sample:
        """
        Fetch a sample by id.

        Raises:
            NotFoundError, UpstreamTimeoutError, NetworkError, UnauthorizedError,
            CircuitOpenError, UnexpectedError
        """
        return self._call(
            "get_sample",
            lambda: Sample.from_raw(self.adapter.get_sample(sample_id, tenant_id=tenant_id)),
            sample_id=sample_id,
        )

    def get_artifacts(self, sample_id: str, tenant_id: Optional[str] = None) -> List[Artifact]:
        """List artifacts for a sample."""
        return self._call(
            "get_artifacts",
            lambda: [
                Artifact.from_raw(item)
                for item in self.adapter.get_artifacts(sample_id, tenant_id=tenant_id)
            ],
            sample_id=sample_id,
        )


__all__ = ["SampleClient"]
