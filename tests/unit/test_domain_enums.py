"""Unit tests for domain enums.

Tests cover:
- MembershipAction parsing and display names
- MemberOperationStatus success classification
- MemberErrorKind transient classification
- InvocationState transition table and terminal states
"""

import pytest

from dlmembership.domain.enums import (
    InvocationState,
    MemberErrorKind,
    MemberOperationStatus,
    MembershipAction,
)


@pytest.mark.unit
class TestMembershipAction:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Add", MembershipAction.ADD),
            ("ADD", MembershipAction.ADD),
            (" remove ", MembershipAction.REMOVE),
            ("Invalid", None),
            ("", None),
        ],
    )
    def test_parse(self, text, expected):
        assert MembershipAction.parse(text) is expected

    def test_display_name(self):
        assert MembershipAction.REMOVE.display_name == "Remove"


@pytest.mark.unit
class TestMemberOperationStatus:
    def test_success_classification(self):
        assert MemberOperationStatus.SUCCEEDED.is_success
        assert MemberOperationStatus.ALREADY_IN_DESIRED_STATE.is_success
        assert not MemberOperationStatus.FAILED.is_success


@pytest.mark.unit
class TestMemberErrorKind:
    def test_transient_kinds(self):
        transient = {k for k in MemberErrorKind if k.is_transient}

        assert transient == {
            MemberErrorKind.THROTTLED,
            MemberErrorKind.SERVICE_UNAVAILABLE,
        }


@pytest.mark.unit
class TestInvocationState:
    """State machine transitions."""

    def test_happy_path_is_legal(self):
        path = [
            InvocationState.RECEIVED,
            InvocationState.VALIDATING,
            InvocationState.AUTHENTICATING,
            InvocationState.EXECUTING,
            InvocationState.AGGREGATING,
            InvocationState.COMPLETED,
        ]

        for current, target in zip(path, path[1:]):
            assert current.can_transition_to(target)

    def test_rejected_and_auth_failed_branches(self):
        assert InvocationState.VALIDATING.can_transition_to(InvocationState.REJECTED)
        assert InvocationState.AUTHENTICATING.can_transition_to(
            InvocationState.AUTH_FAILED
        )

    @pytest.mark.parametrize(
        "current, target",
        [
            (InvocationState.RECEIVED, InvocationState.EXECUTING),
            (InvocationState.VALIDATING, InvocationState.EXECUTING),
            (InvocationState.REJECTED, InvocationState.AUTHENTICATING),
            (InvocationState.AUTH_FAILED, InvocationState.EXECUTING),
            (InvocationState.EXECUTING, InvocationState.COMPLETED),
            (InvocationState.COMPLETED, InvocationState.RECEIVED),
        ],
    )
    def test_illegal_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_terminal_states(self):
        terminal = {s for s in InvocationState if s.is_terminal}

        assert terminal == {
            InvocationState.REJECTED,
            InvocationState.AUTH_FAILED,
            InvocationState.COMPLETED,
        }
