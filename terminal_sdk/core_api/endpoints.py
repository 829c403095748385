"""
Canonical Core API endpoints used by the terminal.

This table represents every Core path the terminal is permitted to call. The
paths are relative to the Core base URL and are reproduced byte-for-byte,
trailing slashes included. Keeping them centralized makes it easy to verify
the rest of the codebase never drifts away from the supported Core contract
(see scripts/core_api_usage_audit.py).

Templates use positional placeholders ({0}, {1}, ...). Callers must supply
exactly as many values as the template declares, in order.
"""

import re
import string
import threading
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Pattern, Tuple

from .errors import ArityMismatch, EndpointDefinitionError, UnknownEndpoint


class EndpointGroup(str, Enum):
    """Functional domain an endpoint belongs to (documentation only)"""
    IDENTITY = "identity"
    AUTH = "auth"
    SESSION = "session"
    PERMISSION = "permission"
    RESOURCE = "resource"
    AUDIT = "audit"
    SHARING = "sharing"
    SETTINGS = "settings"
    TICKET = "ticket"
    SECURITY = "security"
    MISC = "misc"


_FORMATTER = string.Formatter()

# A filled placeholder never spans a path segment or the query string
_SLOT_PATTERN = r"[^/?]+"


def _parse_placeholders(endpoint_id: str, path_template: str) -> Tuple[List[str], int]:
    """
    Split a template into literal chunks and count its placeholders.

    Returns:
        (literals, arity) where len(literals) == arity + 1

    Raises:
        EndpointDefinitionError: If placeholders are not {0}..{n-1} in order
    """
    literals: List[str] = []
    arity = 0
    try:
        parsed = list(_FORMATTER.parse(path_template))
    except ValueError as e:
        raise EndpointDefinitionError(
            f"Endpoint {endpoint_id!r} has a malformed template: {e}", endpoint_id
        ) from e

    pending = ""
    for literal, field_name, format_spec, conversion in parsed:
        pending += literal
        if field_name is None:
            continue
        if field_name != str(arity) or format_spec or conversion:
            raise EndpointDefinitionError(
                f"Endpoint {endpoint_id!r} placeholder {{{field_name}}} must be "
                f"{{{arity}}} (positional, in order, without format spec)",
                endpoint_id,
            )
        literals.append(pending)
        pending = ""
        arity += 1
    literals.append(pending)
    return literals, arity


@dataclass(frozen=True)
class EndpointTemplate:
    """
    One Core API operation.

    Attributes:
        id: Stable symbolic name, unique within a catalog
        path_template: Relative path with positional placeholders
        group: Functional domain
        params: Name of each placeholder, in positional order
        description: Short human description
    """
    id: str
    path_template: str
    group: EndpointGroup = EndpointGroup.MISC
    params: Tuple[str, ...] = ()
    description: str = ""
    arity: int = field(init=False, compare=False)
    _pattern: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.id:
            raise EndpointDefinitionError("Endpoint id must not be empty")
        if not self.path_template.startswith("/"):
            raise EndpointDefinitionError(
                f"Endpoint {self.id!r} path must start with '/': {self.path_template!r}",
                self.id,
            )

        literals, arity = _parse_placeholders(self.id, self.path_template)
        if len(self.params) != arity:
            raise EndpointDefinitionError(
                f"Endpoint {self.id!r} declares {len(self.params)} param(s) "
                f"but its template has {arity} placeholder(s)",
                self.id,
            )

        pattern = _SLOT_PATTERN.join(re.escape(chunk) for chunk in literals)
        object.__setattr__(self, "group", EndpointGroup(self.group))
        object.__setattr__(self, "params", tuple(self.params))
        object.__setattr__(self, "arity", arity)
        object.__setattr__(self, "_pattern", re.compile(pattern))

    def format(self, *values) -> str:
        """Substitute values positionally; no escaping is applied."""
        if len(values) != self.arity:
            raise ArityMismatch(self.id, self.arity, len(values))
        return self.path_template.format(*(str(value) for value in values))

    def matches(self, path: str) -> bool:
        """Return True if a concrete path could have been produced by this template."""
        return self._pattern.fullmatch(path) is not None


class EndpointCatalog:
    """
    Read-only mapping of endpoint id to EndpointTemplate.

    The catalog is populated once in the constructor and never changes
    afterwards, so every lookup is safe to call from any thread without
    locking.
    """

    def __init__(self, templates: Iterable[EndpointTemplate]):
        entries: Dict[str, EndpointTemplate] = {}
        for template in templates:
            if template.id in entries:
                raise EndpointDefinitionError(
                    f"Duplicate endpoint id {template.id!r}", template.id
                )
            entries[template.id] = template
        self._entries: Mapping[str, EndpointTemplate] = MappingProxyType(entries)

    def get(self, endpoint_id: str) -> EndpointTemplate:
        try:
            return self._entries[endpoint_id]
        except KeyError:
            raise UnknownEndpoint(endpoint_id) from None

    def resolve(self, endpoint_id: str) -> str:
        """Return the raw path template for an endpoint id."""
        return self.get(endpoint_id).path_template

    def format(self, endpoint_id: str, *values) -> str:
        """
        Build a concrete request path.

        Args:
            endpoint_id: Registered endpoint id (e.g. "SessionDetail")
            *values: One value per placeholder, in positional order

        Returns:
            Path relative to the Core base URL

        Raises:
            UnknownEndpoint: If endpoint_id is not registered
            ArityMismatch: If the value count differs from the template's
        """
        return self.get(endpoint_id).format(*values)

    def group_of(self, endpoint_id: str) -> EndpointGroup:
        return self.get(endpoint_id).group

    def arity(self, endpoint_id: str) -> int:
        return self.get(endpoint_id).arity

    def ids(self) -> List[str]:
        return list(self._entries)

    def by_group(self, group) -> List[EndpointTemplate]:
        group = EndpointGroup(group)
        return [t for t in self._entries.values() if t.group is group]

    def match(self, path: str) -> Optional[EndpointTemplate]:
        """
        Reverse lookup: find the template a concrete path belongs to.

        Literal templates win over placeholder templates, so
        /api/v1/authentication/connection-token/secret/ resolves to
        ConnectTokenInfo rather than TokenAsset.
        """
        fallback = None
        for template in self._entries.values():
            if template.path_template == path:
                return template
            if fallback is None and template.arity and template.matches(path):
                fallback = template
        return fallback

    def __contains__(self, endpoint_id) -> bool:
        return endpoint_id in self._entries

    def __iter__(self) -> Iterator[EndpointTemplate]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<EndpointCatalog endpoints={len(self)}>"


G = EndpointGroup

CORE_API_ENDPOINTS: Tuple[EndpointTemplate, ...] = (
    # Terminal identity
    EndpointTemplate("UserProfile", "/api/v1/users/profile/", G.IDENTITY,
                     description="Basic profile of the current user"),
    EndpointTemplate("TerminalRegister", "/api/v1/terminal/terminal-registrations/", G.IDENTITY,
                     description="Register this terminal with Core"),
    EndpointTemplate("TerminalConfig", "/api/v1/terminal/terminals/config/", G.IDENTITY,
                     description="Fetch terminal configuration"),
    EndpointTemplate("TerminalHeartBeat", "/api/v1/terminal/terminals/status/", G.IDENTITY,
                     description="Report terminal status"),

    # User login authentication
    EndpointTemplate("TokenAsset", "/api/v1/authentication/connection-token/{0}/", G.AUTH,
                     params=("token_id",), description="Connection token by id"),
    EndpointTemplate("UserTokenAuth", "/api/v1/authentication/tokens/", G.AUTH,
                     description="Authenticate a user login"),
    EndpointTemplate("UserConfirmAuth", "/api/v1/authentication/login-confirm-ticket/status/", G.AUTH),
    EndpointTemplate("AuthMFASelect", "/api/v1/authentication/mfa/select/", G.AUTH,
                     description="Select an MFA method"),
    EndpointTemplate("ConnectTokenInfo", "/api/v1/authentication/connection-token/secret/", G.AUTH),
    EndpointTemplate("SuperConnectTokenInfo", "/api/v1/authentication/super-connection-token/", G.AUTH),

    # Session lifecycle
    EndpointTemplate("SessionList", "/api/v1/terminal/sessions/", G.SESSION,
                     description="Create an asset session"),
    EndpointTemplate("SessionDetail", "/api/v1/terminal/sessions/{0}/", G.SESSION,
                     params=("session_id",), description="Update or finish a session"),
    EndpointTemplate("SessionReplay", "/api/v1/terminal/sessions/{0}/replay/", G.SESSION,
                     params=("session_id",), description="Upload a session replay"),
    EndpointTemplate("SessionCommand", "/api/v1/terminal/commands/", G.SESSION,
                     description="Upload commands in bulk"),
    EndpointTemplate("FinishTask", "/api/v1/terminal/tasks/{0}/", G.SESSION,
                     params=("task_id",)),
    EndpointTemplate("JoinRoomValidate", "/api/v1/terminal/sessions/join/validate/", G.SESSION),
    EndpointTemplate("FTPLogList", "/api/v1/audits/ftp-logs/", G.AUDIT,
                     description="Upload FTP logs"),

    # Authorization
    EndpointTemplate("UserPermsNodesList", "/api/v1/perms/users/{0}/nodes/", G.PERMISSION,
                     params=("user_id",)),
    EndpointTemplate("UserPermsNodeAssetsList", "/api/v1/perms/users/{0}/nodes/{1}/assets/", G.PERMISSION,
                     params=("user_id", "node_id")),
    EndpointTemplate("UserPermsNodeTreeWithAsset", "/api/v1/perms/users/nodes/children-with-assets/tree/",
                     G.PERMISSION, description="Asset tree"),
    EndpointTemplate("UserPermsAssetAccounts", "/api/v1/perms/users/{0}/assets/{1}/accounts/", G.PERMISSION,
                     params=("user_id", "asset_id")),
    EndpointTemplate("UserPermsAssets", "/api/v1/perms/users/{0}/assets/", G.PERMISSION,
                     params=("user_id",)),

    # Resource details
    EndpointTemplate("UserList", "/api/v1/users/users/", G.RESOURCE),
    EndpointTemplate("UserDetail", "/api/v1/users/users/{0}/", G.RESOURCE,
                     params=("user_id",)),
    EndpointTemplate("AssetDetail", "/api/v1/assets/assets/{0}/", G.RESOURCE,
                     params=("asset_id",)),
    EndpointTemplate("AssetPlatform", "/api/v1/assets/assets/{0}/platform/", G.RESOURCE,
                     params=("asset_id",)),
    EndpointTemplate("SystemUserCmdFilterRulesList", "/api/v1/assets/system-users/{0}/cmd-filter-rules/",
                     G.RESOURCE, params=("system_user_id",), description="Command filter rules"),
    EndpointTemplate("CommandFilterRulesList", "/api/v1/assets/cmd-filter-rules/", G.RESOURCE),
    EndpointTemplate("DomainDetailWithGateways", "/api/v1/assets/domains/{0}/?gateway=1", G.RESOURCE,
                     params=("domain_id",)),
    EndpointTemplate("AccountSecret", "/api/v1/assets/account-secrets/{0}/", G.RESOURCE,
                     params=("account_id",)),

    # Auditing
    EndpointTemplate("NotificationCommand", "/api/v1/terminal/commands/insecure-command/", G.AUDIT),
    EndpointTemplate("CommandConfirm", "/api/v1/assets/cmd-filters/command-confirm/", G.AUDIT,
                     description="Request command review"),

    # Session sharing
    EndpointTemplate("ShareCreate", "/api/v1/terminal/session-sharings/", G.SHARING),
    EndpointTemplate("ShareSessionJoin", "/api/v1/terminal/session-join-records/", G.SHARING),
    EndpointTemplate("ShareSessionFinish", "/api/v1/terminal/session-join-records/{0}/finished/", G.SHARING,
                     params=("record_id",)),

    EndpointTemplate("PublicSetting", "/api/v1/settings/public/", G.SETTINGS),
    EndpointTemplate("TicketSession", "/api/v1/tickets/ticket-session-relation/", G.TICKET),
    EndpointTemplate("AssetLoginConfirm", "/api/v1/acls/login-asset/check/", G.SECURITY),
)

del G


_default_catalog: Optional[EndpointCatalog] = None
_default_catalog_lock = threading.Lock()


def get_default_catalog() -> EndpointCatalog:
    """
    Return the process-wide catalog built from CORE_API_ENDPOINTS.

    Built on first use, exactly once even under concurrent first access.
    """
    global _default_catalog

    catalog = _default_catalog
    if catalog is None:
        with _default_catalog_lock:
            if _default_catalog is None:
                _default_catalog = EndpointCatalog(CORE_API_ENDPOINTS)
            catalog = _default_catalog
    return catalog
