"""Microsoft Graph implementation of DirectoryClientProtocol.

Endpoints:
    GET    /groups/{id}                          group by object id
    GET    /groups?$filter=mail eq '...'         group by address
    GET    /groups?$filter=displayName eq '...'  group by display name
    GET    /users/{upn}?$select=id               member id
    POST   /groups/{gid}/members/$ref            add member
    DELETE /groups/{gid}/members/{uid}/$ref      remove member

Supported groups:
    Graph only writes the membership of Microsoft 365 ("Unified") groups and
    security groups. Distribution lists and mail-enabled security groups are
    managed in Exchange Online, and dynamic groups derive their members from
    a rule, so resolve_group rejects them with GROUP_NOT_MANAGEABLE
    (POLICY_VIOLATION) before any member is touched. A mutation the
    directory still rejects for the same reasons maps to POLICY_VIOLATION.

Idempotency:
    - Add: 400 "One or more added object references already exist"
      -> ALREADY_IN_DESIRED_STATE
    - Remove: 404 on the $ref of a resolved member -> ALREADY_IN_DESIRED_STATE

Resolved member ids are cached per client, so a retried mutation does not
resolve the member again.
"""

import re
from urllib.parse import quote

from dlmembership.core.enums import ErrorCode
from dlmembership.core.result import Failure, Result, Success
from dlmembership.domain.enums import MemberErrorKind, MemberOperationStatus
from dlmembership.domain.errors import DirectoryError, DirectoryMemberError
from dlmembership.domain.protocols import LoggerProtocol
from dlmembership.infrastructure.directory.base_api_client import (
    BaseDirectoryAPIClient,
    graph_error,
)
from dlmembership.infrastructure.directory.session import DirectorySession

_GUID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_ALREADY_MEMBER_MARKER = "added object references already exist"
_POLICY_MARKERS = (
    "mail-enabled security groups and or distribution list",
    "dynamic membership",
    "on-premises",
)
_GROUP_SELECT = "id,displayName,mail,groupTypes,mailEnabled,securityEnabled"


class GraphDirectoryClient(BaseDirectoryAPIClient):
    """Group membership operations over Microsoft Graph.

    Example:
        >>> client = GraphDirectoryClient(session, logger=get_logger())
        >>> group = await client.resolve_group("sales@contoso.com")
        >>> await client.add_member(group.value, "ann@contoso.com")
    """

    def __init__(self, session: DirectorySession, *, logger: LoggerProtocol) -> None:
        super().__init__(session, logger=logger, service_name="graph")
        self._member_ids: dict[str, str] = {}

    async def resolve_group(self, group_identity: str) -> Result[str, DirectoryError]:
        """Resolve a group object id, address or display name to its id."""
        operation = "resolve_group"
        if _GUID.match(group_identity):
            result = await self._execute_request(
                method="GET",
                path=f"/groups/{group_identity}",
                params={"$select": _GROUP_SELECT},
                operation=operation,
            )
            if isinstance(result, Failure):
                return result
            if result.value.status_code == 404:
                return Failure(error=_group_not_found(group_identity))
            parsed = self._parse_json_object(result.value, operation)
            if isinstance(parsed, Failure):
                return parsed
            return _group_id(parsed.value, group_identity)

        field = "mail" if "@" in group_identity else "displayName"
        result = await self._execute_request(
            method="GET",
            path="/groups",
            params={
                "$filter": f"{field} eq '{_odata_literal(group_identity)}'",
                "$select": _GROUP_SELECT,
                "$top": "2",
            },
            operation=operation,
        )
        if isinstance(result, Failure):
            return result
        parsed = self._parse_json_object(result.value, operation)
        if isinstance(parsed, Failure):
            return parsed

        matches = parsed.value.get("value")
        if not isinstance(matches, list):
            return self._unexpected_response(result.value, operation)
        if not matches:
            return Failure(error=_group_not_found(group_identity))
        if len(matches) > 1:
            return Failure(
                error=DirectoryMemberError(
                    code=ErrorCode.GROUP_NOT_FOUND,
                    message=(
                        f"Group '{group_identity}' matches more than one group; "
                        "use its address or object id"
                    ),
                    operation=operation,
                    kind=MemberErrorKind.GROUP_AMBIGUOUS,
                )
            )
        return _group_id(matches[0], group_identity)

    async def add_member(
        self, group_id: str, member: str
    ) -> Result[MemberOperationStatus, DirectoryError]:
        """Add member to group; an existing membership is not an error."""
        operation = "add_member"
        member_id = await self._resolve_member(member)
        if isinstance(member_id, Failure):
            return member_id

        result = await self._execute_request(
            method="POST",
            path=f"/groups/{group_id}/members/$ref",
            json_data={
                "@odata.id": (
                    f"{self._session.api_base_url}/directoryObjects/{member_id.value}"
                )
            },
            operation=operation,
        )
        if isinstance(result, Failure):
            return result
        response = result.value

        if response.is_success:
            return Success(value=MemberOperationStatus.SUCCEEDED)
        if response.status_code == 400:
            _, message = graph_error(response)
            if _ALREADY_MEMBER_MARKER in message.lower():
                self._logger.debug("graph_member_already_present", member=member)
                return Success(value=MemberOperationStatus.ALREADY_IN_DESIRED_STATE)
            return Failure(error=_rejected(member, message, operation))
        if response.status_code == 404:
            _, message = graph_error(response)
            return Failure(error=_member_not_found(member, message, operation))

        error_result = self._check_error_response(response, operation)
        return error_result or self._unexpected_response(response, operation)

    async def remove_member(
        self, group_id: str, member: str
    ) -> Result[MemberOperationStatus, DirectoryError]:
        """Remove member from group; a missing membership is not an error."""
        operation = "remove_member"
        member_id = await self._resolve_member(member)
        if isinstance(member_id, Failure):
            return member_id

        result = await self._execute_request(
            method="DELETE",
            path=f"/groups/{group_id}/members/{member_id.value}/$ref",
            operation=operation,
        )
        if isinstance(result, Failure):
            return result
        response = result.value

        if response.is_success:
            return Success(value=MemberOperationStatus.SUCCEEDED)
        if response.status_code == 404:
            self._logger.debug("graph_member_already_absent", member=member)
            return Success(value=MemberOperationStatus.ALREADY_IN_DESIRED_STATE)
        if response.status_code == 400:
            _, message = graph_error(response)
            return Failure(error=_rejected(member, message, operation))

        error_result = self._check_error_response(response, operation)
        return error_result or self._unexpected_response(response, operation)

    async def _resolve_member(self, member: str) -> Result[str, DirectoryError]:
        """Resolve a member UPN to its object id (cached)."""
        key = member.lower()
        if key in self._member_ids:
            return Success(value=self._member_ids[key])

        operation = "resolve_member"
        result = await self._execute_request(
            method="GET",
            path=f"/users/{quote(member, safe='@')}",
            params={"$select": "id"},
            operation=operation,
        )
        if isinstance(result, Failure):
            return result
        response = result.value

        if response.status_code in (400, 404):
            _, message = graph_error(response)
            if response.status_code == 404:
                return Failure(error=_member_not_found(member, message, operation))
            return Failure(
                error=DirectoryMemberError(
                    code=ErrorCode.INVALID_MEMBER_IDENTIFIER,
                    message=f"'{member}' is not a valid member identifier: {message}",
                    operation=operation,
                    kind=MemberErrorKind.INVALID_MEMBER,
                    member=member,
                )
            )

        parsed = self._parse_json_object(response, operation)
        if isinstance(parsed, Failure):
            return parsed
        member_id = parsed.value.get("id")
        if not isinstance(member_id, str) or not member_id:
            return self._unexpected_response(response, operation)

        self._member_ids[key] = member_id
        return Success(value=member_id)


def _group_id(group: object, group_identity: str) -> Result[str, DirectoryError]:
    """Return the id of a group whose membership Graph can write."""
    group_id = group.get("id") if isinstance(group, dict) else None
    if not isinstance(group_id, str) or not group_id:
        return Failure(error=_group_not_found(group_identity))

    group_types = group.get("groupTypes") or []
    if "DynamicMembership" in group_types:
        reason = "its membership is rule-based (dynamic group)"
    elif group.get("mailEnabled") and "Unified" not in group_types:
        reason = (
            "it is a distribution list or mail-enabled security group, "
            "which is managed in Exchange Online"
        )
    else:
        return Success(value=group_id)

    return Failure(
        error=DirectoryMemberError(
            code=ErrorCode.GROUP_NOT_MANAGEABLE,
            message=f"Group '{group_identity}' cannot be changed here: {reason}",
            operation="resolve_group",
            kind=MemberErrorKind.POLICY_VIOLATION,
            details={"group_id": group_id},
        )
    )


def _odata_literal(value: str) -> str:
    """Escape a value for use inside an OData single-quoted string."""
    return value.replace("'", "''")


def _group_not_found(group_identity: str) -> DirectoryMemberError:
    return DirectoryMemberError(
        code=ErrorCode.GROUP_NOT_FOUND,
        message=f"Group '{group_identity}' was not found",
        operation="resolve_group",
        kind=MemberErrorKind.GROUP_NOT_FOUND,
    )


def _member_not_found(member: str, message: str, operation: str) -> DirectoryMemberError:
    return DirectoryMemberError(
        code=ErrorCode.MEMBER_NOT_FOUND,
        message=f"Member '{member}' was not found" + (f": {message}" if message else ""),
        operation=operation,
        kind=MemberErrorKind.MEMBER_NOT_FOUND,
        member=member,
    )


def _rejected(member: str, message: str, operation: str) -> DirectoryMemberError:
    lowered = message.lower()
    kind = (
        MemberErrorKind.POLICY_VIOLATION
        if any(marker in lowered for marker in _POLICY_MARKERS)
        else MemberErrorKind.INVALID_MEMBER
    )
    return DirectoryMemberError(
        code=ErrorCode.MEMBER_OPERATION_REJECTED,
        message=f"Directory rejected the change for '{member}': {message}",
        operation=operation,
        kind=kind,
        member=member,
    )

