# harness/exceptions.py
"""
Exception taxonomy shared by the harness.

Page objects raise ElementNotFoundException / TimeoutException, the API layer
raises APIException, and the test-data cache raises TestDataException (with a
closed set of subclasses so callers can branch on the failure kind while still
catching the single domain type).
"""

from __future__ import annotations

from typing import Optional


class HarnessError(Exception):
    """Base class for every error raised by the harness."""


class ConfigurationError(HarnessError):
    """Required configuration is missing or invalid."""


class ElementNotFoundException(HarnessError):
    def __init__(self, selector: str, message: Optional[str] = None):
        self.selector = selector
        super().__init__(message or f"Element not found: {selector}")


class TimeoutException(HarnessError):
    """An interaction or wait did not complete in time."""


class APIException(HarnessError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ReportError(HarnessError):
    """The report emailer could not load its config or parse a report."""


# ==================== Test data ====================

class TestDataException(HarnessError):
    """Base type for all test-data cache failures."""

    __test__ = False


class TestDataNotFoundError(TestDataException):
    """Named document does not exist in the backing store."""


class TestDataParseError(TestDataException):
    """Document exists but could not be read or parsed."""


class TestDataKeyError(TestDataException):
    """Top-level key is absent from a loaded document."""


class TestDataKeyPathError(TestDataException):
    """Dot-separated key path could not be fully resolved."""
