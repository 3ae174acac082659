# harness/__init__.py
"""
Playwright + pytest end-to-end harness: page objects, REST client, logged
assertions, a cached JSON test-data manager and a report emailer.
"""

from harness.exceptions import (
    APIException,
    ConfigurationError,
    ElementNotFoundException,
    HarnessError,
    TestDataException,
    TimeoutException,
)

__version__ = "1.0.0"

__all__ = [
    "APIException",
    "ConfigurationError",
    "ElementNotFoundException",
    "HarnessError",
    "TestDataException",
    "TimeoutException",
    "__version__",
]
