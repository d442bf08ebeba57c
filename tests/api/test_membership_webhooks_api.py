"""API tests for the membership webhook.

Tests the complete HTTP request/response cycle for:
- POST /api/v1/webhooks/membership (apply Add/Remove to a batch)
- GET /health

Architecture:
- Uses FastAPI TestClient with real app + dependency overrides
- Mock handlers return canned Results to test HTTP mapping
- A real handler over in-memory fakes checks the raw-body path end to end
- RFC 7807 error responses, X-Trace-Id propagation
"""

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

from dlmembership.application.commands.handlers import ApplyMembershipChangeHandler
from dlmembership.application.errors import ApplicationError, ApplicationErrorCode
from dlmembership.application.services import (
    BatchExecutor,
    PayloadNormalizer,
    aggregate,
    aggregate_failure,
)
from dlmembership.core.container import get_apply_membership_change_handler
from dlmembership.core.enums import ErrorCode
from dlmembership.core.errors import DeadlineExceededError, ValidationError
from dlmembership.core.result import Failure, Success
from dlmembership.domain.enums import MemberErrorKind, MemberOperationStatus
from dlmembership.domain.errors import (
    DirectoryAuthenticationError,
    DirectoryPermissionError,
    DirectoryTransientError,
)
from dlmembership.domain.value_objects import MemberOperationResult, RetryPolicy
from dlmembership.main import app
from tests.utils.builders import make_request
from tests.utils.fakes import FakeDirectory, FakeSessionManager, RecordingLogger

WEBHOOK_URL = "/api/v1/webhooks/membership"
PAYLOAD = {
    "Action": "Add",
    "DLName": "sales@contoso.com",
    "MemberUPNs": "ann@contoso.com;bob@contoso.com",
}


# =============================================================================
# Test Doubles
# =============================================================================


class MockHandler:
    """Handler returning a fixed Result and recording commands."""

    def __init__(self, result: Any = None, raises: Exception | None = None) -> None:
        self.result = result
        self.raises = raises
        self.commands = []

    async def handle(self, command):
        self.commands.append(command)
        if self.raises is not None:
            raise self.raises
        return self.result


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _override(handler) -> None:
    app.dependency_overrides[get_apply_membership_change_handler] = lambda: handler


def _ok(member: str) -> MemberOperationResult:
    return MemberOperationResult(member=member, status=MemberOperationStatus.SUCCEEDED)


# =============================================================================
# Executed Batches
# =============================================================================


@pytest.mark.api
class TestExecutedBatch:
    def test_all_succeeded_returns_200(self, client):
        request = make_request("ann@contoso.com", "bob@contoso.com")
        handler = MockHandler(
            Success(value=aggregate(request, [_ok(m) for m in request.members]))
        )
        _override(handler)

        response = client.post(
            WEBHOOK_URL, json=PAYLOAD, headers={"X-Trace-Id": "trace-abc"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["overall_status"] == "all_succeeded"
        assert body["action"] == "add"
        assert body["group_identity"] == "sales@contoso.com"
        assert body["summary"] == {
            "total": 2,
            "succeeded": 2,
            "already_in_desired_state": 0,
            "failed": 0,
        }
        assert body["trace_id"] == "trace-abc"
        assert response.headers["X-Trace-Id"] == "trace-abc"
        assert handler.commands[0].trace_id == "trace-abc"

    def test_partial_failure_returns_207(self, client):
        request = make_request("ann@contoso.com", "ghost@contoso.com")
        results = [
            _ok("ann@contoso.com"),
            MemberOperationResult.failed(
                "ghost@contoso.com",
                MemberErrorKind.MEMBER_NOT_FOUND,
                "Member 'ghost@contoso.com' was not found",
            ),
        ]
        _override(MockHandler(Success(value=aggregate(request, results))))

        response = client.post(WEBHOOK_URL, json=PAYLOAD)

        assert response.status_code == 207
        body = response.json()
        assert body["overall_status"] == "partial_failure"
        assert body["results"][0]["error_detail"] is None
        assert body["results"][1]["status"] == "failed"
        assert body["results"][1]["error_detail"]["kind"] == "member_not_found"

    def test_total_failure_after_start_returns_207(self, client):
        request = make_request("ann@contoso.com")
        results = [
            MemberOperationResult.failed(
                "ann@contoso.com",
                MemberErrorKind.GROUP_NOT_FOUND,
                "Group 'sales@contoso.com' was not found",
                attempts=0,
            )
        ]
        _override(MockHandler(Success(value=aggregate(request, results))))

        response = client.post(WEBHOOK_URL, json=PAYLOAD)

        assert response.status_code == 207
        assert response.json()["overall_status"] == "total_failure"

    def test_generated_trace_id(self, client):
        request = make_request("ann@contoso.com")
        _override(
            MockHandler(Success(value=aggregate(request, [_ok("ann@contoso.com")])))
        )

        response = client.post(WEBHOOK_URL, json=PAYLOAD)

        trace_id = response.headers["X-Trace-Id"]
        assert trace_id
        assert response.json()["trace_id"] == trace_id


# =============================================================================
# Rejected Payloads
# =============================================================================


@pytest.mark.api
class TestRejectedPayload:
    def test_validation_errors_return_400(self, client):
        """Test every violation is listed in the Problem Details body."""
        violations = (
            ValidationError(
                code=ErrorCode.INVALID_ACTION,
                message="Action 'Invalid' is not one of: Add, Remove",
                field="Action",
            ),
            ValidationError(
                code=ErrorCode.MISSING_GROUP_IDENTITY,
                message="DLName must be a non-empty group name or address",
                field="DLName",
            ),
            ValidationError(
                code=ErrorCode.INVALID_PAYLOAD,
                message="Payload is empty",
            ),
        )
        _override(
            MockHandler(
                Failure(
                    error=ApplicationError(
                        code=ApplicationErrorCode.COMMAND_VALIDATION_FAILED,
                        message="Membership request has 3 validation error(s)",
                        validation_errors=violations,
                    )
                )
            )
        )

        response = client.post(WEBHOOK_URL, json={})

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == 400
        assert body["title"] == "Validation Failed"
        assert body["type"].endswith("/errors/command_validation_failed")
        assert body["instance"] == WEBHOOK_URL
        assert [e["field"] for e in body["errors"]] == ["Action", "DLName", "payload"]
        assert body["errors"][0]["code"] == "invalid_action"


# =============================================================================
# Batches That Never Started
# =============================================================================


@pytest.mark.api
class TestBatchNotStarted:
    @pytest.mark.parametrize(
        "diagnostic, status_code, error_code",
        [
            (
                DirectoryAuthenticationError(
                    code=ErrorCode.CREDENTIAL_EXPIRED,
                    message="Directory certificate expired",
                    operation="load_credential",
                    is_credential_expired=True,
                ),
                401,
                "credential_expired",
            ),
            (
                DirectoryPermissionError(
                    code=ErrorCode.PERMISSION_DENIED,
                    message="Application is not permitted to obtain a token",
                    operation="acquire_token",
                ),
                403,
                "permission_denied",
            ),
            (
                DirectoryTransientError(
                    code=ErrorCode.DIRECTORY_UNAVAILABLE,
                    message="Token endpoint unavailable: HTTP 503",
                    operation="acquire_token",
                ),
                503,
                "directory_unavailable",
            ),
            (
                DeadlineExceededError(
                    code=ErrorCode.DEADLINE_EXCEEDED,
                    message="Invocation deadline exceeded",
                    deadline_seconds=240.0,
                ),
                503,
                "deadline_exceeded",
            ),
        ],
    )
    def test_diagnostic_status(self, client, diagnostic, status_code, error_code):
        batch = aggregate_failure(make_request("ann@contoso.com"), diagnostic)
        _override(MockHandler(Success(value=batch)))

        response = client.post(WEBHOOK_URL, json=PAYLOAD)

        assert response.status_code == status_code
        body = response.json()
        assert body["detail"] == diagnostic.message
        assert body["errors"][0]["code"] == error_code


# =============================================================================
# Unhandled Errors
# =============================================================================


@pytest.mark.api
class TestUnhandledError:
    def test_unexpected_exception_returns_500(self):
        _override(MockHandler(raises=RuntimeError("database password is hunter2")))
        client = TestClient(app, raise_server_exceptions=False)

        try:
            response = client.post(WEBHOOK_URL, json=PAYLOAD)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        body = response.json()
        assert body["title"] == "Internal Server Error"
        assert "hunter2" not in response.text


# =============================================================================
# End to End Over Fakes
# =============================================================================


@pytest.mark.api
class TestRawBodyEndToEnd:
    """Real handler, normalizer and executor over an in-memory directory."""

    @pytest.fixture
    def directory(self) -> FakeDirectory:
        return FakeDirectory(
            groups={"sales@contoso.com": "group-1"},
            users={"ann@contoso.com", "bob@contoso.com"},
        )

    @pytest.fixture
    def real_handler(self, directory) -> ApplyMembershipChangeHandler:
        logger = RecordingLogger()
        handler = ApplyMembershipChangeHandler(
            normalizer=PayloadNormalizer(),
            session_manager=FakeSessionManager(),
            executor=BatchExecutor(
                client_factory=lambda session: directory,
                retry_policy=RetryPolicy(max_attempts=1),
                logger=logger,
            ),
            logger=logger,
            deadline_seconds=30.0,
        )
        _override(handler)
        return handler

    def test_double_encoded_text_body(self, client, real_handler, directory):
        """Test a JSON string inside a JSON string, sent as text/plain."""
        body = json.dumps(json.dumps(PAYLOAD))

        response = client.post(
            WEBHOOK_URL, content=body, headers={"Content-Type": "text/plain"}
        )

        assert response.status_code == 200
        assert [r["member"] for r in response.json()["results"]] == [
            "ann@contoso.com",
            "bob@contoso.com",
        ]
        assert directory.memberships["group-1"] == {
            "ann@contoso.com",
            "bob@contoso.com",
        }

    def test_repeat_request_is_idempotent(self, client, real_handler):
        client.post(WEBHOOK_URL, json=PAYLOAD)

        response = client.post(WEBHOOK_URL, json=PAYLOAD)

        assert response.status_code == 200
        assert response.json()["summary"]["already_in_desired_state"] == 2

    def test_three_violations(self, client, real_handler, directory):
        response = client.post(
            WEBHOOK_URL, json={"Action": "Invalid", "DLName": "", "MemberUPNs": ""}
        )

        assert response.status_code == 400
        assert len(response.json()["errors"]) == 3
        assert directory.calls == []

    def test_deeply_nested_body_is_400(self, client, real_handler, directory):
        response = client.post(
            WEBHOOK_URL, content="[" * 100_000 + "]" * 100_000
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_payload"
        assert directory.calls == []

    def test_unknown_member_partial_failure(self, client, real_handler):
        payload = PAYLOAD | {"MemberUPNs": ["ann@contoso.com", "ghost@contoso.com"]}

        response = client.post(WEBHOOK_URL, json=payload)

        assert response.status_code == 207
        assert response.json()["summary"]["failed"] == 1


@pytest.mark.api
class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
