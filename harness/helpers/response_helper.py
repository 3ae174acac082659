# harness/helpers/response_helper.py
"""
Extraction and assertion helpers for httpx responses.

Assertions raise AssertionError with a readable message so pytest reports
them as ordinary test failures.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx
import jsonschema

from harness.exceptions import APIException

logger = logging.getLogger(__name__)


def _ensure(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def is_subset(subset: Any, actual: Any) -> bool:
    """True when every key/item in subset is present (recursively) in actual."""
    if isinstance(subset, dict):
        if not isinstance(actual, dict):
            return False
        return all(k in actual and is_subset(v, actual[k]) for k, v in subset.items())
    if isinstance(subset, list):
        if not isinstance(actual, list) or len(subset) != len(actual):
            return False
        return all(is_subset(s, a) for s, a in zip(subset, actual))
    return subset == actual


# ==================== Extraction ====================

def parse_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse JSON response: {e}")
        raise APIException(f"JSON parsing failed: {e}", response.status_code) from e


def get_text(response: httpx.Response) -> str:
    return response.text


def get_status_code(response: httpx.Response) -> int:
    return response.status_code


def get_headers(response: httpx.Response) -> Dict[str, str]:
    return {k.lower(): v for k, v in response.headers.items()}


def get_header(response: httpx.Response, header_name: str) -> Optional[str]:
    return response.headers.get(header_name)


def extract_data(response: httpx.Response, key: str) -> Any:
    body = parse_json(response)
    if not isinstance(body, dict) or key not in body:
        raise KeyError(f'Key "{key}" not found in response')
    return body[key]


def extract_nested_data(response: httpx.Response, key_path: str) -> Any:
    result = parse_json(response)
    for key in key_path.split("."):
        if isinstance(result, dict) and key in result:
            result = result[key]
        elif isinstance(result, list) and key.isdecimal() and int(key) < len(result):
            result = result[int(key)]
        else:
            raise KeyError(f'Key path "{key_path}" not found in response')
    return result


# ==================== Assertions ====================

def assert_status_code(response: httpx.Response, expected_status: int) -> None:
    actual = response.status_code
    _ensure(actual == expected_status, f"Expected status {expected_status}, got {actual}")
    logger.info(f"Status code assertion passed: {actual} === {expected_status}")


def assert_ok(response: httpx.Response) -> None:
    _ensure(response.is_success, f"Expected 2xx response, got {response.status_code}")
    logger.info(f"Response OK assertion passed: {response.status_code}")


def assert_contains_key(response: httpx.Response, key: str) -> None:
    body = parse_json(response)
    _ensure(isinstance(body, dict) and key in body, f"Response does not contain key: {key}")
    logger.info(f"Response contains key: {key}")


def assert_body_matches(response: httpx.Response, expected: Any) -> None:
    actual = parse_json(response)
    _ensure(actual == expected, f"Response body mismatch: {actual!r} != {expected!r}")
    logger.info("Response body matches expected")


def assert_body_contains(response: httpx.Response, subset: Any) -> None:
    actual = parse_json(response)
    _ensure(is_subset(subset, actual), f"Response body does not contain {subset!r}")
    logger.info("Response body contains expected subset")


def assert_header_exists(response: httpx.Response, header_name: str) -> None:
    _ensure(get_header(response, header_name) is not None, f"Header missing: {header_name}")
    logger.info(f"Header exists: {header_name}")


def assert_header_value(response: httpx.Response, header_name: str, expected_value: str) -> None:
    actual = get_header(response, header_name)
    _ensure(actual == expected_value, f"Header {header_name}: {actual!r} != {expected_value!r}")
    logger.info(f"Header {header_name} value matches: {expected_value}")


def assert_response_time(response: httpx.Response, max_time_ms: float) -> None:
    elapsed_ms = response.elapsed.total_seconds() * 1000
    _ensure(elapsed_ms < max_time_ms, f"Response took {elapsed_ms:.0f}ms (limit {max_time_ms}ms)")
    logger.info(f"Response time: {elapsed_ms:.0f}ms (< {max_time_ms}ms)")


def validate_schema(response: httpx.Response, schema: Dict[str, Any]) -> None:
    body = parse_json(response)
    try:
        jsonschema.validate(instance=body, schema=schema)
    except jsonschema.ValidationError as e:
        raise AssertionError(f"Schema validation failed: {e.message}") from e
    logger.info("Schema validation passed")


def compare_responses(first: httpx.Response, second: httpx.Response) -> bool:
    return parse_json(first) == parse_json(second)


def log_response(response: httpx.Response, label: str = "Response") -> None:
    logger.info(f"{label} - Status: {response.status_code}")
    logger.debug(f"{label} - Headers: {get_headers(response)}")
    try:
        body: Any = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = response.text
    logger.debug(f"{label} - Body: {body}")
