# ============================================================================
# HTTP ADAPTERS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Clients - Sync httpx adapters for the Forge / Anvil /v1 APIs
# PURPOSE: Map REST responses to DTOs and HTTP failures to ClientError
# CREATED: 18 SEP 2026
# ============================================================================
"""
HTTP Adapters

Sync httpx clients for the upstream /v1 REST APIs. Selected with
FORGE_ADAPTER=http / ANVIL_ADAPTER=http.

Every request carries `content-type: application/json` and, when a
tenant is known (per call or DEFAULT_TENANT_ID), `x-tenant-id`.

Status mapping (all operations):
    2xx            success (204 on next-assignment -> no_assignments)
    400 / 422      validation, field map taken from body["errors"]
    401 / 403      unauthorized
    404            not_found (no_assignments for next-assignment)
    502/503/504    network
    other 5xx      unexpected
Transport:
    httpx.TimeoutException   timeout
    httpx.TransportError     network
    undecodable JSON         unexpected (malformed_payload)

Health: any status below 500 counts as healthy; the endpoint only has
to answer.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Type
from urllib.parse import quote

import httpx

from core.contracts import (
    ClientError,
    MalformedPayloadError,
    NetworkError,
    NoAssignmentsError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedError,
    UpstreamTimeoutError,
    ValidationError,
)
from core.models import Artifact, Assignment, Label, QueueStats, Sample
from clients.base import QueueAdapter, SampleAdapter

logger = logging.getLogger(__name__)

NETWORK_STATUS_CODES = frozenset({502, 503, 504})
VALIDATION_STATUS_CODES = frozenset({400, 422})
UNAUTHORIZED_STATUS_CODES = frozenset({401, 403})

# /health answers sub-second or counts as down
HEALTH_TIMEOUT_SECONDS = 0.8


# ============================================================================
# RESPONSE MAPPING
# ============================================================================

def _path(resp: httpx.Response) -> str:
    try:
        return resp.request.url.path
    except RuntimeError:
        # Response built without a request (tests, replays)
        return "?"


def _safe_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"detail": resp.text}


def _field_errors(body: Any) -> Dict[str, str]:
    """Extract a field -> message map from a 400/422 body."""
    errors = body.get("errors") if isinstance(body, Mapping) else None
    if isinstance(errors, Mapping) and errors:
        result = {}
        for name, message in errors.items():
            if isinstance(message, (list, tuple)):
                message = "; ".join(str(m) for m in message)
            result[str(name)] = str(message)
        return result
    detail = body.get("detail") if isinstance(body, Mapping) else None
    return {"base": str(detail or "invalid request")}


def raise_for_status(
    resp: httpx.Response,
    not_found: Type[ClientError] = NotFoundError,
) -> None:
    """
    Raise the ClientError matching a non-2xx response.

    Args:
        resp: httpx response
        not_found: Error class used for 404 (NoAssignmentsError for next-assignment)
    """
    code = resp.status_code
    if 200 <= code < 300:
        return

    path = _path(resp)
    body = _safe_body(resp)

    if code in UNAUTHORIZED_STATUS_CODES:
        raise UnauthorizedError(f"{code} from {path}", detail=body)
    if code == 404:
        raise not_found(f"404 from {path}")
    if code in VALIDATION_STATUS_CODES:
        raise ValidationError(_field_errors(body))
    if code in NETWORK_STATUS_CODES:
        raise NetworkError(f"{code} from {path}", detail=body)

    logger.error(f"Upstream error {code}: {path} -> {body}")
    raise UnexpectedError(f"HTTP {code} from {path}", detail=body)


def decode_json(resp: httpx.Response) -> Any:
    """Parse a 2xx body; undecodable JSON is a malformed payload."""
    try:
        return resp.json()
    except ValueError as e:
        raise MalformedPayloadError(f"invalid JSON from {_path(resp)}: {e}") from e


# ============================================================================
# TRANSPORT
# ============================================================================

class HttpTransport:
    """Base URL, timeout and tenant header handling shared by both upstreams."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        default_tenant_id: Optional[str] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds)
        self._health_timeout = httpx.Timeout(min(timeout_seconds, HEALTH_TIMEOUT_SECONDS))
        self.default_tenant_id = default_tenant_id

    @property
    def base_url(self) -> str:
        return self._base_url

    def headers(self, tenant_id: Optional[str] = None) -> Dict[str, str]:
        headers = {"content-type": "application/json"}
        tenant = tenant_id or self.default_tenant_id
        if tenant:
            headers["x-tenant-id"] = tenant
        return headers

    def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        tenant_id: Optional[str] = None,
        timeout: Optional[httpx.Timeout] = None,
    ) -> httpx.Response:
        """
        Send one request. Transport failures are raised as ClientError;
        the status code is left for the caller to interpret.
        """
        url = f"{self._base_url}{path}"

        try:
            with httpx.Client(timeout=timeout or self._timeout) as client:
                return client.request(
                    method,
                    url,
                    json=json_body,
                    params=params,
                    headers=self.headers(tenant_id),
                )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Timeout calling {url}: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"Cannot reach {url}: {e}") from e
        except httpx.HTTPError as e:
            raise UnexpectedError(f"HTTP error calling {url}: {e}", detail=repr(e)) from e

    def health_check(self) -> None:
        resp = self.request("GET", "/health", timeout=self._health_timeout)
        if resp.status_code >= 500:
            raise_for_status(resp)


# ============================================================================
# FORGE
# ============================================================================

class HttpSampleAdapter(SampleAdapter):
    """Forge /v1 API."""

    name = "http"

    def __init__(
        self,
        base_url: str = "http://localhost:4102",
        timeout_seconds: float = 5.0,
        default_tenant_id: Optional[str] = None,
    ):
        self.transport = HttpTransport(base_url, timeout_seconds, default_tenant_id)

    def get_sample(self, sample_id: str, tenant_id: Optional[str] = None) -> Sample:
        resp = self.transport.request("GET", f"/v1/samples/{quote(sample_id, safe='')}", tenant_id=tenant_id)
        raise_for_status(resp)
        return Sample.from_raw(decode_json(resp))

    def get_artifacts(self, sample_id: str, tenant_id: Optional[str] = None) -> List[Artifact]:
        resp = self.transport.request(
            "GET", f"/v1/samples/{quote(sample_id, safe='')}/artifacts", tenant_id=tenant_id
        )
        raise_for_status(resp)
        body = decode_json(resp)
        items = body.get("artifacts") if isinstance(body, Mapping) else body
        if not isinstance(items, list):
            raise MalformedPayloadError(f"artifact list expected for sample {sample_id}")
        return [Artifact.from_raw(item) for item in items]

    def health_check(self) -> None:
        self.transport.health_check()


# ============================================================================
# ANVIL
# ============================================================================

class HttpQueueAdapter(QueueAdapter):
    """Anvil /v1 API."""

    name = "http"

    def __init__(
        self,
        base_url: str = "http://localhost:4101",
        timeout_seconds: float = 5.0,
        default_tenant_id: Optional[str] = None,
    ):
        self.transport = HttpTransport(base_url, timeout_seconds, default_tenant_id)

    def get_next_assignment(
        self,
        queue_id: str,
        user_id: str,
        tenant_id: Optional[str] = None,
    ) -> Assignment:
        resp = self.transport.request(
            "GET",
            f"/v1/queues/{quote(queue_id, safe='')}/assignments/next",
            params={"user_id": user_id},
            tenant_id=tenant_id,
        )
        if resp.status_code == 204:
            raise NoAssignmentsError(f"Queue {queue_id} has no assignments")
        raise_for_status(resp, not_found=NoAssignmentsError)
        return Assignment.from_raw(decode_json(resp))

    def submit_label(
        self,
        assignment_id: str,
        values: Dict[str, Any],
        user_id: Optional[str] = None,
        time_spent_ms: int = 0,
        tenant_id: Optional[str] = None,
    ) -> Label:
        payload: Dict[str, Any] = {
            "assignment_id": assignment_id,
            "values": dict(values),
            "time_spent_ms": time_spent_ms,
        }
        if user_id:
            payload["user_id"] = user_id
        tenant = tenant_id or self.transport.default_tenant_id
        if tenant:
            payload["tenant_id"] = tenant

        resp = self.transport.request("POST", "/v1/labels", json_body=payload, tenant_id=tenant)
        raise_for_status(resp)
        body = decode_json(resp)
        if not isinstance(body, Mapping):
            raise MalformedPayloadError("label object expected from POST /v1/labels")
        return Label.from_raw({**payload, **body})

    def get_queue_stats(self, queue_id: str, tenant_id: Optional[str] = None) -> QueueStats:
        resp = self.transport.request("GET", f"/v1/queues/{quote(queue_id, safe='')}", tenant_id=tenant_id)
        raise_for_status(resp)
        body = decode_json(resp)
        stats = (body.get("stats") if isinstance(body, Mapping) else None) or {}
        if not isinstance(stats, Mapping):
            raise MalformedPayloadError(f"stats object expected for queue {queue_id}")

        raw = {"queue_id": queue_id, "labeled": 0, "remaining": 0, **stats}
        if "total" not in raw:
            labeled, remaining = raw["labeled"], raw["remaining"]
            if isinstance(labeled, int) and isinstance(remaining, int):
                raw["total"] = labeled + remaining
        return QueueStats.from_raw(raw)

    def check_queue_access(self, user_id: str, queue_id: str) -> bool:
        resp = self.transport.request(
            "GET", f"/v1/queues/{quote(queue_id, safe='')}", params={"user_id": user_id}
        )
        # 403 here means "no access to this queue", not bad credentials
        if resp.status_code == 403:
            return False
        raise_for_status(resp)
        return True

    def health_check(self) -> None:
        self.transport.health_check()


__all__ = [
    "HEALTH_TIMEOUT_SECONDS",
    "HttpTransport",
    "HttpSampleAdapter",
    "HttpQueueAdapter",
    "raise_for_status",
    "decode_json",
]
