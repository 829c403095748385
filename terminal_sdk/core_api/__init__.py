"""
Core API Endpoint Catalog

Registry of the Core (bastion control plane) HTTP endpoints the terminal
calls, grouped by functional domain, plus a thin client that consumes it.

Typical use:
    catalog = get_default_catalog()
    catalog.format("UserPermsNodeAssetsList", user_id, node_id)
"""

__version__ = "1.0.0"

from .endpoints import (
    CORE_API_ENDPOINTS,
    EndpointCatalog,
    EndpointGroup,
    EndpointTemplate,
    get_default_catalog,
)
from .errors import (
    ArityMismatch,
    CoreApiError,
    CoreRequestError,
    EndpointDefinitionError,
    UnknownEndpoint,
)
from .client import CoreApiClient

__all__ = [
    "CORE_API_ENDPOINTS",
    "EndpointCatalog",
    "EndpointGroup",
    "EndpointTemplate",
    "get_default_catalog",
    "CoreApiClient",
    "CoreApiError",
    "UnknownEndpoint",
    "ArityMismatch",
    "EndpointDefinitionError",
    "CoreRequestError",
]
