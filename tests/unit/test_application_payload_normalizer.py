"""Unit tests for PayloadNormalizer.

Tests cover:
- Valid payloads as mappings, JSON strings, double-encoded strings and bytes
- Case-insensitive field names and values, field aliases
- Member list forms: list, delimited string, embedded JSON array
- Trimming and case-insensitive de-duplication (first spelling wins)
- Collect-all validation (every violation reported together)
- Undecodable payloads and the decode depth bound
"""

import json

import pytest

from dlmembership.application.services import PayloadNormalizer
from dlmembership.core.enums import ErrorCode
from dlmembership.core.result import Failure, Success
from dlmembership.domain.enums import MembershipAction


@pytest.fixture
def normalizer() -> PayloadNormalizer:
    return PayloadNormalizer()


def _payload(**overrides):
    payload = {
        "Action": "Add",
        "DLName": "sales@contoso.com",
        "MemberUPNs": ["ann@contoso.com", "bob@contoso.com"],
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Valid Payloads
# =============================================================================


@pytest.mark.unit
class TestValidPayloads:
    """Payloads that normalize to a MembershipRequest."""

    def test_mapping_payload(self, normalizer):
        """Test a plain mapping normalizes to the canonical request."""
        result = normalizer.normalize(_payload())

        assert isinstance(result, Success)
        request = result.value
        assert request.action is MembershipAction.ADD
        assert request.group_identity == "sales@contoso.com"
        assert request.members == ("ann@contoso.com", "bob@contoso.com")

    def test_json_string_payload(self, normalizer):
        """Test a JSON string body is decoded."""
        result = normalizer.normalize(json.dumps(_payload(Action="Remove")))

        assert isinstance(result, Success)
        assert result.value.action is MembershipAction.REMOVE

    def test_double_encoded_payload(self, normalizer):
        """Test a JSON string wrapped in another JSON string is decoded."""
        raw = json.dumps(json.dumps(_payload()))

        result = normalizer.normalize(raw)

        assert isinstance(result, Success)
        assert result.value.members == ("ann@contoso.com", "bob@contoso.com")

    def test_bytes_with_byte_order_mark(self, normalizer):
        """Test UTF-8 bytes with a BOM are decoded."""
        raw = b"\xef\xbb\xbf" + json.dumps(_payload()).encode("utf-8")

        result = normalizer.normalize(raw)

        assert isinstance(result, Success)

    def test_action_is_case_insensitive(self, normalizer):
        """Test action text is matched regardless of case and padding."""
        result = normalizer.normalize(_payload(Action="  rEmOvE "))

        assert isinstance(result, Success)
        assert result.value.action is MembershipAction.REMOVE

    def test_field_names_are_case_insensitive(self, normalizer):
        """Test lower-case field names are accepted."""
        result = normalizer.normalize(
            {"action": "add", "dlname": "sales", "memberupns": "ann@contoso.com"}
        )

        assert isinstance(result, Success)
        assert result.value.group_identity == "sales"

    def test_field_aliases(self, normalizer):
        """Test GroupName and Members aliases."""
        result = normalizer.normalize(
            {"Action": "Add", "GroupName": "sales", "Members": ["ann@contoso.com"]}
        )

        assert isinstance(result, Success)
        assert result.value.group_identity == "sales"
        assert result.value.members == ("ann@contoso.com",)

    def test_exact_field_name_wins_over_alias(self, normalizer):
        """Test DLName is used when both DLName and Group are present."""
        result = normalizer.normalize(_payload(Group="other"))

        assert isinstance(result, Success)
        assert result.value.group_identity == "sales@contoso.com"

    def test_group_identity_is_trimmed(self, normalizer):
        result = normalizer.normalize(_payload(DLName="  sales@contoso.com \t"))

        assert isinstance(result, Success)
        assert result.value.group_identity == "sales@contoso.com"


# =============================================================================
# Member List Forms
# =============================================================================


@pytest.mark.unit
class TestMemberParsing:
    """Member list splitting, trimming and de-duplication."""

    def test_delimited_string_with_mixed_separators(self, normalizer):
        """Test ',' and ';' both split, and blanks are dropped."""
        result = normalizer.normalize(
            _payload(MemberUPNs=" ann@contoso.com; bob@contoso.com,,carl@contoso.com ;")
        )

        assert isinstance(result, Success)
        assert result.value.members == (
            "ann@contoso.com",
            "bob@contoso.com",
            "carl@contoso.com",
        )

    def test_embedded_json_array_string(self, normalizer):
        """Test a member string holding a JSON array is parsed as a list."""
        result = normalizer.normalize(
            _payload(MemberUPNs='["ann@contoso.com", "bob@contoso.com"]')
        )

        assert isinstance(result, Success)
        assert result.value.members == ("ann@contoso.com", "bob@contoso.com")

    def test_duplicates_removed_case_insensitively(self, normalizer):
        """Test the first spelling of a duplicate member is kept."""
        result = normalizer.normalize(
            _payload(
                MemberUPNs=["Ann@Contoso.com", "bob@contoso.com", "ann@contoso.com "]
            )
        )

        assert isinstance(result, Success)
        assert result.value.members == ("Ann@Contoso.com", "bob@contoso.com")

    def test_order_is_first_seen(self, normalizer):
        members = ["c@contoso.com", "a@contoso.com", "b@contoso.com"]

        result = normalizer.normalize(_payload(MemberUPNs=members))

        assert isinstance(result, Success)
        assert list(result.value.members) == members

    def test_non_string_member_reported_with_index(self, normalizer):
        """Test a non-string entry is an error even when others are valid."""
        result = normalizer.normalize(_payload(MemberUPNs=["ann@contoso.com", 42]))

        assert isinstance(result, Failure)
        assert len(result.error) == 1
        error = result.error[0]
        assert error.code is ErrorCode.INVALID_MEMBER_IDENTIFIER
        assert error.field == "MemberUPNs"
        assert error.details == {"index": 1}

    def test_member_value_of_wrong_type(self, normalizer):
        result = normalizer.normalize(_payload(MemberUPNs={"upn": "ann@contoso.com"}))

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.INVALID_MEMBER_IDENTIFIER
        assert "object" in result.error[0].message

    def test_member_array_nested_beyond_parser_limit(self, normalizer):
        raw = _payload(MemberUPNs="[" * 100_000 + "]" * 100_000)

        result = normalizer.normalize(raw)

        assert isinstance(result, Failure)
        assert [(e.field, e.code) for e in result.error] == [
            ("MemberUPNs", ErrorCode.INVALID_PAYLOAD)
        ]

    def test_only_blank_members(self, normalizer):
        """Test a list of blank strings counts as no members."""
        result = normalizer.normalize(_payload(MemberUPNs=["  ", ""]))

        assert isinstance(result, Failure)
        assert [e.code for e in result.error] == [ErrorCode.MISSING_MEMBERS]


# =============================================================================
# Validation Errors
# =============================================================================


@pytest.mark.unit
class TestValidationErrors:
    """Every violation is reported, in field order."""

    def test_three_violations_reported_together(self, normalizer):
        """Test invalid action, empty group and empty members give 3 errors."""
        result = normalizer.normalize(
            {"Action": "Invalid", "DLName": "", "MemberUPNs": ""}
        )

        assert isinstance(result, Failure)
        assert [e.field for e in result.error] == ["Action", "DLName", "MemberUPNs"]
        assert [e.code for e in result.error] == [
            ErrorCode.INVALID_ACTION,
            ErrorCode.MISSING_GROUP_IDENTITY,
            ErrorCode.MISSING_MEMBERS,
        ]

    def test_missing_fields(self, normalizer):
        """Test an empty object reports all three required fields."""
        result = normalizer.normalize({})

        assert isinstance(result, Failure)
        assert len(result.error) == 3
        assert "required" in result.error[0].message

    def test_unknown_action_keeps_value_in_details(self, normalizer):
        result = normalizer.normalize(_payload(Action="Replace"))

        assert isinstance(result, Failure)
        assert result.error[0].details == {"value": "Replace"}

    def test_action_of_wrong_type(self, normalizer):
        result = normalizer.normalize(_payload(Action=1))

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.INVALID_ACTION
        assert "number" in result.error[0].message

    def test_group_identity_of_wrong_type(self, normalizer):
        result = normalizer.normalize(_payload(DLName=["sales"]))

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.MISSING_GROUP_IDENTITY
        assert "array" in result.error[0].message

    def test_nesting_beyond_parser_limit(self, normalizer):
        """Test a body nested past the recursion limit is rejected, not raised."""
        result = normalizer.normalize("[" * 100_000 + "]" * 100_000)

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.INVALID_PAYLOAD
        assert "nested too deeply" in result.error[0].message

    def test_whitespace_group_identity(self, normalizer):
        result = normalizer.normalize(_payload(DLName="   "))

        assert isinstance(result, Failure)
        assert result.error[0].field == "DLName"


# =============================================================================
# Undecodable Payloads
# =============================================================================


@pytest.mark.unit
class TestUndecodablePayloads:
    """Payloads that never reach field validation."""

    def test_invalid_json(self, normalizer):
        result = normalizer.normalize("{not json")

        assert isinstance(result, Failure)
        assert len(result.error) == 1
        assert result.error[0].code is ErrorCode.INVALID_PAYLOAD
        assert result.error[0].field is None

    def test_empty_body(self, normalizer):
        result = normalizer.normalize(b"")

        assert isinstance(result, Failure)
        assert result.error[0].message == "Payload is empty"

    def test_invalid_utf8(self, normalizer):
        result = normalizer.normalize(b"\xff\xfe{}")

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.INVALID_PAYLOAD

    def test_top_level_array(self, normalizer):
        result = normalizer.normalize("[1, 2]")

        assert isinstance(result, Failure)
        assert "array" in result.error[0].message

    def test_decode_depth_limit_reached(self):
        """Test a payload still a string after the max decodes is rejected."""
        raw = _payload()
        for _ in range(4):
            raw = json.dumps(raw)
        normalizer = PayloadNormalizer(max_decode_depth=3)

        result = normalizer.normalize(raw)

        assert isinstance(result, Failure)
        assert result.error[0].code is ErrorCode.PAYLOAD_NESTING_TOO_DEEP
        assert result.error[0].details == {"max_decode_depth": 3}

    def test_decode_depth_limit_inclusive(self):
        """Test exactly max_decode_depth encodings still decode."""
        raw = _payload()
        for _ in range(3):
            raw = json.dumps(raw)

        result = PayloadNormalizer(max_decode_depth=3).normalize(raw)

        assert isinstance(result, Success)
