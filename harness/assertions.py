# harness/assertions.py
"""
Logged assertions.

Every assertion gets a step id (STEP_{n}_{epoch_ms}) and logs three lines:
start, then PASSED or FAILED, and records the outcome with log_step so the
per-test log reads as a timeline. Locator and page checks delegate to
Playwright's auto-waiting expect(); value and API checks raise AssertionError.
soft_assert() logs a failure and returns False instead of raising.
"""

from __future__ import annotations

import itertools
import re
import time
from typing import Any, Callable, Dict, Optional, Pattern, Sequence, Union

import httpx
from playwright.sync_api import Locator, Page, expect

from harness.helpers.response_helper import is_subset
from harness.logger import STEP_FAILED, STEP_PASSED, TestLogger

TextMatch = Union[str, Pattern[str]]

SOFT_KINDS = ("visible", "text", "contains_text")


def _fail_unless(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


class Assertions:
    def __init__(self, test_logger: Optional[TestLogger] = None):
        self.log = test_logger or TestLogger()
        self._counter = itertools.count(1)

    # ==================== Core ====================

    def _step_id(self) -> str:
        return f"STEP_{next(self._counter)}_{int(time.time() * 1000)}"

    def _check(self, name: str, check: Callable[[], Any], details: Optional[Dict[str, Any]] = None,
               soft: bool = False) -> bool:
        details = {k: v for k, v in (details or {}).items() if v is not None}
        step_id = self._step_id()
        self.log.info(f"🔍 [{step_id}] Starting assertion: {name}", details or None)
        try:
            check()
        except AssertionError as e:
            self.log.error(f"❌ [{step_id}] Assertion FAILED: {name}", {"error": str(e), **details})
            self.log.log_step(name, STEP_FAILED)
            if soft:
                return False
            raise
        self.log.info(f"✅ [{step_id}] Assertion PASSED: {name}", details or None)
        self.log.log_step(name, STEP_PASSED)
        return True

    @staticmethod
    def _loc(locator: Locator, message: Optional[str], **extra: Any) -> Dict[str, Any]:
        return {"selector": str(locator), "message": message, **extra}

    # ==================== Element visibility / state ====================

    def to_be_visible(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is visible", lambda: expect(locator).to_be_visible(timeout=timeout),
                    self._loc(locator, message))

    def to_be_hidden(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is hidden", lambda: expect(locator).to_be_hidden(timeout=timeout),
                    self._loc(locator, message))

    def to_be_attached(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is attached", lambda: expect(locator).to_be_attached(timeout=timeout),
                    self._loc(locator, message))

    def to_be_enabled(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is enabled", lambda: expect(locator).to_be_enabled(timeout=timeout),
                    self._loc(locator, message))

    def to_be_disabled(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is disabled", lambda: expect(locator).to_be_disabled(timeout=timeout),
                    self._loc(locator, message))

    def to_be_checked(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is checked", lambda: expect(locator).to_be_checked(timeout=timeout),
                    self._loc(locator, message))

    def to_be_unchecked(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is unchecked",
                    lambda: expect(locator).to_be_checked(checked=False, timeout=timeout),
                    self._loc(locator, message))

    def to_be_editable(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is editable", lambda: expect(locator).to_be_editable(timeout=timeout),
                    self._loc(locator, message))

    def to_be_focused(self, locator: Locator, message: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._check("Element is focused", lambda: expect(locator).to_be_focused(timeout=timeout),
                    self._loc(locator, message))

    # ==================== Element content ====================

    def to_contain_text(self, locator: Locator, expected: TextMatch, message: Optional[str] = None,
                        timeout: Optional[float] = None) -> None:
        self._check("Element contains text", lambda: expect(locator).to_contain_text(expected, timeout=timeout),
                    self._loc(locator, message, expected=str(expected)))

    def to_have_text(self, locator: Locator, expected: TextMatch, message: Optional[str] = None,
                     timeout: Optional[float] = None) -> None:
        self._check("Element has text", lambda: expect(locator).to_have_text(expected, timeout=timeout),
                    self._loc(locator, message, expected=str(expected)))

    def to_have_attribute(self, locator: Locator, name: str, value: TextMatch, message: Optional[str] = None,
                          timeout: Optional[float] = None) -> None:
        self._check(f"Element has attribute {name}",
                    lambda: expect(locator).to_have_attribute(name, value, timeout=timeout),
                    self._loc(locator, message, expected=str(value)))

    def to_have_class(self, locator: Locator, expected: TextMatch, message: Optional[str] = None,
                      timeout: Optional[float] = None) -> None:
        self._check("Element has class", lambda: expect(locator).to_have_class(expected, timeout=timeout),
                    self._loc(locator, message, expected=str(expected)))

    def to_have_id(self, locator: Locator, expected: str, message: Optional[str] = None,
                   timeout: Optional[float] = None) -> None:
        self._check("Element has id", lambda: expect(locator).to_have_id(expected, timeout=timeout),
                    self._loc(locator, message, expected=expected))

    def to_have_value(self, locator: Locator, expected: TextMatch, message: Optional[str] = None,
                      timeout: Optional[float] = None) -> None:
        self._check("Element has value", lambda: expect(locator).to_have_value(expected, timeout=timeout),
                    self._loc(locator, message, expected=str(expected)))

    def to_have_values(self, locator: Locator, expected: Sequence[TextMatch], message: Optional[str] = None,
                       timeout: Optional[float] = None) -> None:
        self._check("Element has values", lambda: expect(locator).to_have_values(expected, timeout=timeout),
                    self._loc(locator, message, expected=[str(v) for v in expected]))

    def to_have_count(self, locator: Locator, count: int, message: Optional[str] = None,
                      timeout: Optional[float] = None) -> None:
        self._check(f"Element count is {count}", lambda: expect(locator).to_have_count(count, timeout=timeout),
                    self._loc(locator, message, expected=count))

    def to_have_css(self, locator: Locator, name: str, value: TextMatch, message: Optional[str] = None,
                    timeout: Optional[float] = None) -> None:
        self._check(f"Element has CSS {name}", lambda: expect(locator).to_have_css(name, value, timeout=timeout),
                    self._loc(locator, message, expected=str(value)))

    # ==================== Page ====================

    def to_have_url(self, page: Page, expected: TextMatch, message: Optional[str] = None,
                    timeout: Optional[float] = None) -> None:
        self._check("Page has URL", lambda: expect(page).to_have_url(expected, timeout=timeout),
                    {"expected": str(expected), "actual": page.url, "message": message})

    def to_have_title(self, page: Page, expected: TextMatch, message: Optional[str] = None,
                      timeout: Optional[float] = None) -> None:
        self._check("Page has title", lambda: expect(page).to_have_title(expected, timeout=timeout),
                    {"expected": str(expected), "message": message})

    # ==================== API ====================

    def to_have_status_code(self, response: httpx.Response, expected: int, message: Optional[str] = None) -> None:
        self._check(
            f"Response status is {expected}",
            lambda: _fail_unless(response.status_code == expected,
                                 f"Expected status {expected}, got {response.status_code}"),
            {"url": str(response.request.url), "actual": response.status_code, "message": message},
        )

    def to_be_ok(self, response: httpx.Response, message: Optional[str] = None) -> None:
        self._check(
            "Response is OK",
            lambda: _fail_unless(response.is_success, f"Expected 2xx response, got {response.status_code}"),
            {"url": str(response.request.url), "actual": response.status_code, "message": message},
        )

    def to_contain_response_data(self, response: httpx.Response, expected: Dict[str, Any],
                                 message: Optional[str] = None) -> None:
        def check() -> None:
            body = response.json()
            _fail_unless(is_subset(expected, body), f"Response body {body!r} does not contain {expected!r}")

        self._check("Response contains data", check, {"expected": expected, "message": message})

    # ==================== Values ====================

    def assert_condition(self, condition: bool, message: str) -> None:
        self._check(message, lambda: _fail_unless(bool(condition), message))

    def assert_equal(self, actual: Any, expected: Any, message: Optional[str] = None) -> None:
        self._check(message or "Values are equal",
                    lambda: _fail_unless(actual == expected, f"Expected {expected!r}, got {actual!r}"),
                    {"expected": repr(expected), "actual": repr(actual)})

    def assert_deep_equal(self, actual: Any, expected: Any, message: Optional[str] = None) -> None:
        # Python equality already compares nested containers structurally.
        self._check(message or "Values are deeply equal",
                    lambda: _fail_unless(actual == expected, f"Expected {expected!r}, got {actual!r}"))

    def assert_truthy(self, value: Any, message: Optional[str] = None) -> None:
        self._check(message or "Value is truthy", lambda: _fail_unless(bool(value), f"Expected truthy, got {value!r}"))

    def assert_falsy(self, value: Any, message: Optional[str] = None) -> None:
        self._check(message or "Value is falsy", lambda: _fail_unless(not value, f"Expected falsy, got {value!r}"))

    def assert_none(self, value: Any, message: Optional[str] = None) -> None:
        self._check(message or "Value is None", lambda: _fail_unless(value is None, f"Expected None, got {value!r}"))

    def assert_not_none(self, value: Any, message: Optional[str] = None) -> None:
        self._check(message or "Value is not None", lambda: _fail_unless(value is not None, "Expected a value, got None"))

    def assert_contains(self, container: Sequence[Any], item: Any, message: Optional[str] = None) -> None:
        self._check(message or "Collection contains item",
                    lambda: _fail_unless(item in container, f"{item!r} not found in {container!r}"))

    def assert_has_property(self, obj: Any, prop: str, message: Optional[str] = None) -> None:
        def check() -> None:
            present = prop in obj if isinstance(obj, dict) else hasattr(obj, prop)
            _fail_unless(present, f"Property {prop!r} not found")

        self._check(message or f"Object has property {prop}", check)

    def assert_string_contains(self, value: str, substring: str, message: Optional[str] = None) -> None:
        self._check(message or "String contains substring",
                    lambda: _fail_unless(substring in value, f"{substring!r} not found in {value!r}"))

    def assert_string_matches(self, value: str, pattern: TextMatch, message: Optional[str] = None) -> None:
        self._check(message or "String matches pattern",
                    lambda: _fail_unless(re.search(pattern, value) is not None,
                                         f"{value!r} does not match {getattr(pattern, 'pattern', pattern)!r}"))

    def assert_greater_than(self, actual: float, expected: float, message: Optional[str] = None) -> None:
        self._check(message or f"Value is greater than {expected}",
                    lambda: _fail_unless(actual > expected, f"Expected {actual!r} > {expected!r}"))

    def assert_less_than(self, actual: float, expected: float, message: Optional[str] = None) -> None:
        self._check(message or f"Value is less than {expected}",
                    lambda: _fail_unless(actual < expected, f"Expected {actual!r} < {expected!r}"))

    # ==================== Soft ====================

    def soft_assert(self, locator: Locator, kind: str, expected: Optional[TextMatch] = None,
                    message: Optional[str] = None, timeout: Optional[float] = None) -> bool:
        """Check without raising; returns whether the check passed."""
        if kind not in SOFT_KINDS:
            raise ValueError(f"Unsupported soft assertion: {kind} (expected one of {SOFT_KINDS})")
        if kind != "visible" and expected is None:
            raise ValueError(f"Soft {kind} needs an expected value")

        def check() -> None:
            if kind == "visible":
                expect(locator).to_be_visible(timeout=timeout)
            elif kind == "text":
                expect(locator).to_have_text(expected, timeout=timeout)
            else:
                expect(locator).to_contain_text(expected, timeout=timeout)

        return self._check(f"Soft {kind}", check, self._loc(locator, message, expected=expected), soft=True)
