"""Payload normalizer.

Turns the loosely structured webhook body into a validated
MembershipRequest, or the complete list of violations.

Accepted input:
    - A mapping
    - A JSON string / bytes, possibly JSON-encoded again one or more times
      by the caller's transport (bounded by MAX_PAYLOAD_DECODE_DEPTH)

Fields (keys matched case-insensitively):
    Action      "Add" | "Remove"
    DLName      group identity (aliases: GroupName, Group)
    MemberUPNs  list of strings, or one string delimited by "," or ";"
                (alias: Members)

Violations are collected, not fail-fast: a caller sending
{"Action": "Invalid", "DLName": "", "MemberUPNs": ""} gets three errors back.
"""

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from dlmembership.core.constants import MAX_PAYLOAD_DECODE_DEPTH, MEMBER_SEPARATORS
from dlmembership.core.enums import ErrorCode
from dlmembership.core.errors import ValidationError
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.enums import MembershipAction
from dlmembership.domain.value_objects import MembershipRequest

ACTION_FIELD = "Action"
GROUP_FIELD = "DLName"
MEMBERS_FIELD = "MemberUPNs"

# Canonical field -> accepted aliases (lowercase), canonical name first
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    ACTION_FIELD: ("action",),
    GROUP_FIELD: ("dlname", "groupname", "group"),
    MEMBERS_FIELD: ("memberupns", "members"),
}

_MEMBER_SPLIT = re.compile(f"[{re.escape(MEMBER_SEPARATORS)}]")


class PayloadNormalizer:
    """Validate and normalize inbound membership payloads.

    Example:
        >>> normalizer = PayloadNormalizer()
        >>> result = normalizer.normalize(
        ...     '{"Action": "add", "DLName": "sales@contoso.com", '
        ...     '"MemberUPNs": "ann@contoso.com; bob@contoso.com"}'
        ... )
        >>> result.value.members
        ('ann@contoso.com', 'bob@contoso.com')
    """

    def __init__(self, *, max_decode_depth: int = MAX_PAYLOAD_DECODE_DEPTH) -> None:
        """Initialize normalizer.

        Args:
            max_decode_depth: Maximum JSON decodes applied to string input.
        """
        self._max_decode_depth = max_decode_depth

    def normalize(self, raw: Any) -> Result[MembershipRequest, list[ValidationError]]:
        """Normalize a raw payload.

        Args:
            raw: Mapping, str or bytes.

        Returns:
            Success(MembershipRequest): Payload is valid.
            Failure(list[ValidationError]): Every violation found, ordered
                Action, DLName, MemberUPNs. Undecodable payloads yield a
                single whole-payload error.
        """
        decoded = self._decode(raw)
        if isinstance(decoded, Failure):
            return Failure(error=[decoded.error])
        payload = decoded.value

        errors: list[ValidationError] = []

        action = self._parse_action(_lookup(payload, ACTION_FIELD), errors)
        group_identity = self._parse_group_identity(
            _lookup(payload, GROUP_FIELD), errors
        )
        members = self._parse_members(_lookup(payload, MEMBERS_FIELD), errors)

        if errors or action is None or group_identity is None:
            return Failure(error=errors)

        return Success(
            value=MembershipRequest(
                action=action,
                group_identity=group_identity,
                members=members,
            )
        )

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def _decode(self, raw: Any) -> Result[Mapping[str, Any], ValidationError]:
        """Unwrap string-encoded payloads until an object is reached."""
        value = raw
        if isinstance(value, bytes | bytearray):
            try:
                value = bytes(value).decode("utf-8-sig")
            except UnicodeDecodeError:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_PAYLOAD,
                        message="Payload is not valid UTF-8",
                    )
                )

        depth = 0
        while isinstance(value, str):
            if depth >= self._max_decode_depth:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.PAYLOAD_NESTING_TOO_DEEP,
                        message=(
                            "Payload is still a string after "
                            f"{self._max_decode_depth} JSON decodes"
                        ),
                        details={"max_decode_depth": self._max_decode_depth},
                    )
                )
            text = value.strip()
            if not text:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_PAYLOAD,
                        message="Payload is empty",
                    )
                )
            try:
                value = json.loads(text)
            except json.JSONDecodeError as e:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_PAYLOAD,
                        message=f"Payload is not valid JSON: {e.msg} at position {e.pos}",
                    )
                )
            except RecursionError:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_PAYLOAD,
                        message="Payload is nested too deeply to parse",
                    )
                )
            depth += 1

        if not isinstance(value, Mapping):
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_PAYLOAD,
                    message=f"Payload must be a JSON object, got {_type_name(value)}",
                )
            )
        return Success(value=value)

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def _parse_action(
        self, value: Any, errors: list[ValidationError]
    ) -> MembershipAction | None:
        if value is None:
            errors.append(
                ValidationError(
                    code=ErrorCode.INVALID_ACTION,
                    message="Action is required; expected one of: Add, Remove",
                    field=ACTION_FIELD,
                )
            )
            return None
        if not isinstance(value, str):
            errors.append(
                ValidationError(
                    code=ErrorCode.INVALID_ACTION,
                    message=f"Action must be a string, got {_type_name(value)}",
                    field=ACTION_FIELD,
                )
            )
            return None

        action = MembershipAction.parse(value)
        if action is None:
            errors.append(
                ValidationError(
                    code=ErrorCode.INVALID_ACTION,
                    message=f"Action '{value}' is not one of: Add, Remove",
                    field=ACTION_FIELD,
                    details={"value": value},
                )
            )
        return action

    def _parse_group_identity(
        self, value: Any, errors: list[ValidationError]
    ) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()

        if value is not None and not isinstance(value, str):
            message = f"DLName must be a string, got {_type_name(value)}"
        else:
            message = "DLName must be a non-empty group name or address"
        errors.append(
            ValidationError(
                code=ErrorCode.MISSING_GROUP_IDENTITY,
                message=message,
                field=GROUP_FIELD,
            )
        )
        return None

    def _parse_members(
        self, value: Any, errors: list[ValidationError]
    ) -> tuple[str, ...]:
        if value is None:
            errors.append(
                ValidationError(
                    code=ErrorCode.MISSING_MEMBERS,
                    message="MemberUPNs is required",
                    field=MEMBERS_FIELD,
                )
            )
            return ()

        if isinstance(value, str):
            try:
                embedded = _embedded_json_list(value)
            except RecursionError:
                errors.append(
                    ValidationError(
                        code=ErrorCode.INVALID_PAYLOAD,
                        message="MemberUPNs is nested too deeply to parse",
                        field=MEMBERS_FIELD,
                    )
                )
                return ()
            pieces: Sequence[Any] = (
                embedded if embedded is not None else _MEMBER_SPLIT.split(value)
            )
        elif isinstance(value, Sequence):
            pieces = value
        else:
            errors.append(
                ValidationError(
                    code=ErrorCode.INVALID_MEMBER_IDENTIFIER,
                    message=(
                        "MemberUPNs must be a delimited string or a list of strings, "
                        f"got {_type_name(value)}"
                    ),
                    field=MEMBERS_FIELD,
                )
            )
            return ()

        members: list[str] = []
        seen: set[str] = set()
        for index, piece in enumerate(pieces):
            if not isinstance(piece, str):
                errors.append(
                    ValidationError(
                        code=ErrorCode.INVALID_MEMBER_IDENTIFIER,
                        message=(
                            f"MemberUPNs[{index}] must be a string, "
                            f"got {_type_name(piece)}"
                        ),
                        field=MEMBERS_FIELD,
                        details={"index": index},
                    )
                )
                continue
            member = piece.strip()
            if not member or member.lower() in seen:
                continue
            seen.add(member.lower())
            members.append(member)

        if not members:
            errors.append(
                ValidationError(
                    code=ErrorCode.MISSING_MEMBERS,
                    message="MemberUPNs must contain at least one member identifier",
                    field=MEMBERS_FIELD,
                )
            )
        return tuple(members)


def _lookup(payload: Mapping[str, Any], field: str) -> Any:
    """Find a field by exact name, then case-insensitively, then by alias."""
    if field in payload:
        return payload[field]
    lowered = {k.lower(): v for k, v in payload.items() if isinstance(k, str)}
    for alias in _FIELD_ALIASES[field]:
        if alias in lowered:
            return lowered[alias]
    return None


def _embedded_json_list(value: str) -> list[Any] | None:
    """Return the list when a member string is itself a JSON array.

    Raises:
        RecursionError: The array is nested deeper than json can parse.
    """
    text = value.strip()
    if not text.startswith("["):
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, list) else None


def _type_name(value: Any) -> str:
    """JSON-flavoured type name for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list | tuple):
        return "array"
    return type(value).__name__
