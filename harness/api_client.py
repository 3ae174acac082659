# harness/api_client.py
"""
REST client used by API tests and service objects.

- Sync httpx.Client with a base URL and JSON default headers
- Absolute URLs pass through untouched (third-party APIs in the same suite)
- Every call logs request and response; non-2xx raises APIException
- Sensitive headers are redacted in logs
- RequestSpec (from RequestBuilder) can be sent directly
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from harness.exceptions import APIException
from harness.helpers.request_builder import RequestSpec
from harness.logger import TestLogger

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

_SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie", "x-auth-token"}


def _redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {k: "[REDACTED]" if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()}


def parse_body(response: httpx.Response) -> Any:
    """JSON body when the response declares JSON, else text."""
    ctype = response.headers.get("content-type", "")
    if "json" in ctype:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass
    return response.text


class APIClient:
    def __init__(
        self,
        base_url: str,
        timeout_ms: int = 30000,
        test_logger: Optional[TestLogger] = None,
        transport: Optional[httpx.BaseTransport] = None,
        verify: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_ms = timeout_ms
        self.log = test_logger or TestLogger()
        self._client = httpx.Client(
            timeout=timeout_ms / 1000,
            transport=transport,
            verify=verify,
            follow_redirects=True,
        )

    @classmethod
    def from_config(cls, config, test_logger: Optional[TestLogger] = None, **kwargs) -> "APIClient":
        # API_MAX_RETRIES covers connection failures only, never HTTP error statuses.
        kwargs.setdefault("transport", httpx.HTTPTransport(retries=config.settings.api_max_retries))
        return cls(
            config.get_api_base_url(),
            timeout_ms=config.get_timeouts()["api"],
            test_logger=test_logger,
            **kwargs,
        )

    def build_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        return f"{self.base_url}{endpoint}"

    @staticmethod
    def build_headers(custom: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        return {**DEFAULT_HEADERS, **(custom or {})}

    # ==================== Core ====================

    def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> httpx.Response:
        method = method.upper()
        url = self.build_url(endpoint)
        merged = self.build_headers(headers)
        self.log.log_api_request(method, url, data)
        logger.debug(f"{method} {url} headers={_redact_headers(merged)} params={params}")

        try:
            response = self._client.request(
                method,
                url,
                json=data,
                params=params,
                headers=merged,
                timeout=(timeout or self.timeout_ms) / 1000,
            )
        except httpx.HTTPError as e:
            self.log.error(f"{method} {endpoint} failed: {e}")
            raise APIException(f"API {method} {endpoint} failed: {e}") from e

        return self._handle_response(response, method, endpoint)

    def _handle_response(self, response: httpx.Response, method: str, endpoint: str) -> httpx.Response:
        status = response.status_code
        self.log.log_api_response(method, endpoint, status, parse_body(response))
        if not response.is_success:
            raise APIException(f"API {method} {endpoint} failed with status {status}", status)
        return response

    def send(self, spec: RequestSpec, timeout: Optional[int] = None) -> httpx.Response:
        return self.request(
            spec.method,
            spec.endpoint,
            data=spec.body,
            params=spec.params or None,
            headers=spec.headers or None,
            timeout=timeout,
        )

    # ==================== Verbs ====================

    def get(self, endpoint: str, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("GET", endpoint, params=params, headers=headers, timeout=timeout)

    def post(self, endpoint: str, data: Any = None, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("POST", endpoint, data, params, headers, timeout)

    def put(self, endpoint: str, data: Any = None, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("PUT", endpoint, data, params, headers, timeout)

    def patch(self, endpoint: str, data: Any = None, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("PATCH", endpoint, data, params, headers, timeout)

    def delete(self, endpoint: str, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("DELETE", endpoint, params=params, headers=headers, timeout=timeout)

    def head(self, endpoint: str, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("HEAD", endpoint, params=params, headers=headers, timeout=timeout)

    def options(self, endpoint: str, params=None, headers=None, timeout=None) -> httpx.Response:
        return self.request("OPTIONS", endpoint, params=params, headers=headers, timeout=timeout)

    # ==================== Lifecycle ====================

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
