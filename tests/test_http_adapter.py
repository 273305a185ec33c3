# ============================================================================
# HTTP ADAPTER TESTS
# ============================================================================
# EPOCH: 2 - RESILIENT CLIENTS
# STATUS: Tests - Forge / Anvil REST adapters
# PURPOSE: Verify request shape and status / transport error mapping
# CREATED: 29 SEP 2026
# ============================================================================
"""
HTTP Adapter Tests

Uses unittest.mock to patch httpx.Client; no real HTTP traffic. Responses
are real httpx.Response objects so status and JSON handling are exercised.

Run with:
    pytest tests/test_http_adapter.py -v
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from core.contracts import (
    ErrorKind,
    MalformedPayloadError,
    NetworkError,
    NoAssignmentsError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedError,
    UpstreamTimeoutError,
    ValidationError,
)
from clients.adapters.http import HEALTH_TIMEOUT_SECONDS, HttpQueueAdapter, HttpSampleAdapter

PATCH_TARGET = "clients.adapters.http.httpx.Client"

CREATED_AT = "2026-09-14T10:00:00Z"


# ============================================================================
# FIXTURES
# ============================================================================

def _response(status_code, json_body=None, method="GET", url="http://upstream/x", content=None):
    request = httpx.Request(method, url)
    if content is not None:
        return httpx.Response(status_code, content=content, request=request)
    if json_body is None:
        return httpx.Response(status_code, request=request)
    return httpx.Response(status_code, json=json_body, request=request)


def _install(mock_client_cls, response=None, side_effect=None):
    """Wire the patched httpx.Client to hand back one response (or raise)."""
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    if side_effect is not None:
        mock_client.request.side_effect = side_effect
    else:
        mock_client.request.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


def _sample_body(sample_id="s-1"):
    return {
        "id": sample_id,
        "pipeline_id": "pipe",
        "payload": {"text": "hi"},
        "artifacts": [],
        "created_at": CREATED_AT,
    }


def _assignment_body():
    return {
        "id": "asg-1",
        "queue_id": "q-1",
        "sample": _sample_body(),
        "schema": {"fields": [{"name": "quality", "type": "rating", "min": 1, "max": 5}]},
        "metadata": {"component_module": "narrative_compare"},
    }


@pytest.fixture
def forge():
    return HttpSampleAdapter(base_url="http://forge:4102/", timeout_seconds=2.0, default_tenant_id="t-default")


@pytest.fixture
def anvil():
    return HttpQueueAdapter(base_url="http://anvil:4101", timeout_seconds=2.0)


# ============================================================================
# FORGE
# ============================================================================

class TestHttpSampleAdapter:
    """GET /v1/samples/..."""

    @patch(PATCH_TARGET)
    def test_get_sample(self, mock_client_cls, forge):
        mock_client = _install(mock_client_cls, _response(200, _sample_body()))

        sample = forge.get_sample("s-1", tenant_id="t-1")

        assert sample.id == "s-1"
        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "http://forge:4102/v1/samples/s-1")
        assert kwargs["headers"] == {"content-type": "application/json", "x-tenant-id": "t-1"}
        timeout = mock_client_cls.call_args.kwargs["timeout"]
        assert isinstance(timeout, httpx.Timeout)
        assert timeout.read == 2.0

    @patch(PATCH_TARGET)
    def test_default_tenant_header(self, mock_client_cls, forge):
        mock_client = _install(mock_client_cls, _response(200, _sample_body()))
        forge.get_sample("s-1")
        assert mock_client.request.call_args.kwargs["headers"]["x-tenant-id"] == "t-default"

    @patch(PATCH_TARGET)
    def test_sample_id_is_quoted(self, mock_client_cls, forge):
        mock_client = _install(mock_client_cls, _response(200, _sample_body("a/b")))
        forge.get_sample("a/b")
        assert mock_client.request.call_args.args[1] == "http://forge:4102/v1/samples/a%2Fb"

    @patch(PATCH_TARGET)
    def test_404_is_not_found(self, mock_client_cls, forge):
        _install(mock_client_cls, _response(404, {"detail": "nope"}))
        with pytest.raises(NotFoundError):
            forge.get_sample("missing")

    @patch(PATCH_TARGET)
    def test_artifacts_wrapped_or_bare(self, mock_client_cls, forge):
        artifact = {
            "id": "a-1",
            "sample_id": "s-1",
            "artifact_type": "image",
            "url": "https://cdn/a.png",
            "filename": "a.png",
            "size_bytes": 10,
            "content_type": "image/png",
        }
        _install(mock_client_cls, _response(200, {"artifacts": [artifact]}))
        assert forge.get_artifacts("s-1")[0].id == "a-1"

        _install(mock_client_cls, _response(200, [artifact]))
        assert forge.get_artifacts("s-1")[0].is_image

    @patch(PATCH_TARGET)
    def test_invalid_json_is_malformed(self, mock_client_cls, forge):
        _install(mock_client_cls, _response(200, content=b"<html>oops</html>"))
        with pytest.raises(MalformedPayloadError) as exc_info:
            forge.get_sample("s-1")
        assert exc_info.value.kind is ErrorKind.UNEXPECTED

    @patch(PATCH_TARGET)
    def test_incomplete_sample_is_malformed(self, mock_client_cls, forge):
        _install(mock_client_cls, _response(200, {"id": "s-1"}))
        with pytest.raises(MalformedPayloadError):
            forge.get_sample("s-1")


# ============================================================================
# STATUS & TRANSPORT MAPPING
# ============================================================================

class TestErrorMapping:
    """HTTP status / httpx exceptions -> ClientError."""

    @pytest.mark.parametrize(
        "status,error_cls",
        [
            (401, UnauthorizedError),
            (403, UnauthorizedError),
            (502, NetworkError),
            (503, NetworkError),
            (504, NetworkError),
            (500, UnexpectedError),
            (418, UnexpectedError),
        ],
    )
    @patch(PATCH_TARGET)
    def test_status_codes(self, mock_client_cls, status, error_cls, forge):
        _install(mock_client_cls, _response(status, {"detail": "x"}))
        with pytest.raises(error_cls):
            forge.get_sample("s-1")

    @patch(PATCH_TARGET)
    def test_timeout(self, mock_client_cls, forge):
        _install(mock_client_cls, side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(UpstreamTimeoutError):
            forge.get_sample("s-1")

    @patch(PATCH_TARGET)
    def test_connect_error(self, mock_client_cls, forge):
        _install(mock_client_cls, side_effect=httpx.ConnectError("Connection refused"))
        with pytest.raises(NetworkError) as exc_info:
            forge.get_sample("s-1")
        assert "Connection refused" in exc_info.value.message

    @patch(PATCH_TARGET)
    def test_health_ok_below_500(self, mock_client_cls, forge):
        mock_client = _install(mock_client_cls, _response(404))
        forge.health_check()
        assert mock_client.request.call_args.args == ("GET", "http://forge:4102/health")
        assert mock_client_cls.call_args.kwargs["timeout"].read == HEALTH_TIMEOUT_SECONDS

    @patch(PATCH_TARGET)
    def test_health_uses_shorter_timeout_only(self, mock_client_cls, forge):
        _install(mock_client_cls, _response(200, _sample_body()))
        forge.get_sample("s-1")
        assert mock_client_cls.call_args.kwargs["timeout"].read == 2.0

        short = HttpSampleAdapter(base_url="http://forge:4102", timeout_seconds=0.3)
        _install(mock_client_cls, _response(200))
        short.health_check()
        assert mock_client_cls.call_args.kwargs["timeout"].read == 0.3

    @patch(PATCH_TARGET)
    def test_health_503(self, mock_client_cls, forge):
        _install(mock_client_cls, _response(503))
        with pytest.raises(NetworkError):
            forge.health_check()


# ============================================================================
# ANVIL
# ============================================================================

class TestHttpQueueAdapter:
    """Anvil /v1 queue and label endpoints."""

    @patch(PATCH_TARGET)
    def test_next_assignment(self, mock_client_cls, anvil):
        mock_client = _install(mock_client_cls, _response(200, _assignment_body()))

        assignment = anvil.get_next_assignment("q-1", "u-1")

        assert assignment.component_module == "narrative_compare"
        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "http://anvil:4101/v1/queues/q-1/assignments/next")
        assert kwargs["params"] == {"user_id": "u-1"}
        assert "x-tenant-id" not in kwargs["headers"]

    @pytest.mark.parametrize("status", [204, 404])
    @patch(PATCH_TARGET)
    def test_empty_queue(self, mock_client_cls, status, anvil):
        _install(mock_client_cls, _response(status))
        with pytest.raises(NoAssignmentsError):
            anvil.get_next_assignment("q-1", "u-1")

    @patch(PATCH_TARGET)
    def test_submit_label(self, mock_client_cls, anvil):
        mock_client = _install(
            mock_client_cls,
            _response(201, {"id": "l-1", "sample_id": "s-1", "queue_id": "q-1", "created_at": CREATED_AT}, method="POST"),
        )

        label = anvil.submit_label("asg-1", {"quality": 4}, user_id="u-1", time_spent_ms=900, tenant_id="t-1")

        assert label.id == "l-1"
        assert label.values == {"quality": 4}
        assert label.time_spent_ms == 900
        args, kwargs = mock_client.request.call_args
        assert args == ("POST", "http://anvil:4101/v1/labels")
        assert kwargs["json"] == {
            "assignment_id": "asg-1",
            "values": {"quality": 4},
            "time_spent_ms": 900,
            "user_id": "u-1",
            "tenant_id": "t-1",
        }

    @patch(PATCH_TARGET)
    def test_submit_label_validation(self, mock_client_cls, anvil):
        _install(
            mock_client_cls,
            _response(422, {"errors": {"quality": ["is required", "must be a number"]}}, method="POST"),
        )
        with pytest.raises(ValidationError) as exc_info:
            anvil.submit_label("asg-1", {})
        assert exc_info.value.field_errors == {"quality": "is required; must be a number"}

    @patch(PATCH_TARGET)
    def test_validation_without_field_map(self, mock_client_cls, anvil):
        _install(mock_client_cls, _response(400, {"detail": "bad body"}, method="POST"))
        with pytest.raises(ValidationError) as exc_info:
            anvil.submit_label("asg-1", {})
        assert exc_info.value.field_errors == {"base": "bad body"}

    @patch(PATCH_TARGET)
    def test_queue_stats(self, mock_client_cls, anvil):
        _install(
            mock_client_cls,
            _response(200, {"id": "q-1", "stats": {"labeled": 5, "remaining": 15, "active_labelers": 2}}),
        )
        stats = anvil.get_queue_stats("q-1")
        assert (stats.queue_id, stats.total, stats.labeled, stats.remaining) == ("q-1", 20, 5, 15)

    @patch(PATCH_TARGET)
    def test_inconsistent_stats_are_malformed(self, mock_client_cls, anvil):
        _install(mock_client_cls, _response(200, {"stats": {"total": 3, "labeled": 5, "remaining": 15}}))
        with pytest.raises(MalformedPayloadError):
            anvil.get_queue_stats("q-1")

    @patch(PATCH_TARGET)
    def test_queue_access(self, mock_client_cls, anvil):
        _install(mock_client_cls, _response(200, {"id": "q-1"}))
        assert anvil.check_queue_access("u-1", "q-1") is True

        _install(mock_client_cls, _response(403))
        assert anvil.check_queue_access("u-1", "q-1") is False

        _install(mock_client_cls, _response(401))
        with pytest.raises(UnauthorizedError):
            anvil.check_queue_access("u-1", "q-1")
