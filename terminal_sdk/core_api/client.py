"""
Core API Client

Thin consumer of the endpoint catalog. Every call names a catalog endpoint
id plus its placeholder values; the client formats the path, prefixes the
Core base URL and issues the request over a shared requests.Session.

Provides:
- Catalog-checked URL building (catalog errors surface before any I/O)
- Per-client request serialization (requests.Session is not thread-safe)
- Logging of each call and consistent CoreRequestError mapping

Does NOT provide:
- Retries or backoff
- Request signing (pass a requests auth object instead)
"""

import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import requests

from terminal_sdk.config import CORE_HOST, CORE_VERIFY_SSL, REQUEST_TIMEOUT
from terminal_sdk.utils import _safe_json_parse
from .endpoints import EndpointCatalog, get_default_catalog
from .errors import CoreRequestError

logger = logging.getLogger(__name__)


class CoreApiClient:
    """
    Issues requests against Core using endpoint ids from an EndpointCatalog.

    The catalog is injected so tests (or alternate deployments) can supply
    their own; it defaults to the process-wide catalog.
    """

    def __init__(
        self,
        base_url: str = CORE_HOST,
        catalog: Optional[EndpointCatalog] = None,
        auth: Optional[requests.auth.AuthBase] = None,
        verify_ssl: bool = CORE_VERIFY_SSL,
        timeout: Tuple[int, int] = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: Core base URL, e.g. https://core.example.com
            catalog: Endpoint catalog (defaults to get_default_catalog())
            auth: Optional requests auth object applied to every request
            verify_ssl: Whether to verify SSL certificates
            timeout: Tuple of (connect_timeout, read_timeout)
            session: Optional pre-configured requests.Session
        """
        self.base_url = base_url.rstrip("/")
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.session.verify = verify_ssl
        if auth is not None:
            self.session.auth = auth
        self._lock = threading.Lock()

        if not verify_ssl:
            import urllib3
            urllib3.disable_warnings()

    def url_for(self, endpoint_id: str, *values) -> str:
        """Absolute URL for a catalog endpoint."""
        return self.base_url + self.catalog.format(endpoint_id, *values)

    def request(
        self,
        method: str,
        endpoint_id: str,
        *values,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        **kwargs
    ) -> Any:
        """
        Call a Core endpoint.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint_id: Catalog endpoint id (e.g. "SessionReplay")
            *values: Placeholder values for the endpoint template, in order
            params: Optional query string parameters
            json: Optional JSON body
            **kwargs: Additional arguments for requests.Session.request()

        Returns:
            Parsed JSON body ({} for empty responses)

        Raises:
            UnknownEndpoint: If endpoint_id is not in the catalog
            ArityMismatch: If values do not fit the endpoint template
            CoreRequestError: On transport failure or non-2xx status
        """
        url = self.url_for(endpoint_id, *values)
        method = method.upper()

        kwargs.setdefault("timeout", self.timeout)
        headers = dict(kwargs.pop("headers", None) or {})
        headers.setdefault("Accept", "application/json")

        start_time = time.time()
        with self._lock:
            try:
                response = self.session.request(
                    method, url, params=params, json=json, headers=headers, **kwargs
                )
            except requests.exceptions.RequestException as e:
                logger.warning(f"{method} {endpoint_id} ({url}) failed: {e}")
                raise CoreRequestError(
                    f"{method} {url} failed: {e}", endpoint_id=endpoint_id
                ) from e

        response_time_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"{method} {endpoint_id} -> {response.status_code} ({response_time_ms}ms)")

        if not response.ok:
            body = response.text[:2000] if response.text else ""
            logger.warning(f"{method} {endpoint_id} ({url}) returned {response.status_code}: {body}")
            raise CoreRequestError(
                f"{method} {url} returned HTTP {response.status_code}",
                endpoint_id=endpoint_id,
                status_code=response.status_code,
                response_body=body,
            )

        return _safe_json_parse(response)

    def get(self, endpoint_id: str, *values, **kwargs) -> Any:
        return self.request("GET", endpoint_id, *values, **kwargs)

    def post(self, endpoint_id: str, *values, **kwargs) -> Any:
        return self.request("POST", endpoint_id, *values, **kwargs)

    def put(self, endpoint_id: str, *values, **kwargs) -> Any:
        return self.request("PUT", endpoint_id, *values, **kwargs)

    def patch(self, endpoint_id: str, *values, **kwargs) -> Any:
        return self.request("PATCH", endpoint_id, *values, **kwargs)

    def delete(self, endpoint_id: str, *values, **kwargs) -> Any:
        return self.request("DELETE", endpoint_id, *values, **kwargs)

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
