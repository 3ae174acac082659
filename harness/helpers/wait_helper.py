# harness/helpers/wait_helper.py
"""
Polling and retry utilities for conditions Playwright cannot auto-wait on.

All durations are milliseconds to line up with Playwright's timeout units.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from playwright.sync_api import Locator, Page

from harness.exceptions import HarnessError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def wait(milliseconds: int) -> None:
    time.sleep(milliseconds / 1000)


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: int = 30000,
    poll_interval: int = 500,
) -> bool:
    """
    Poll condition until it returns truthy or timeout elapses.

    Exceptions raised by condition count as "not yet" and polling continues.
    Returns False on timeout instead of raising.
    """
    deadline = time.monotonic() + timeout / 1000
    while time.monotonic() < deadline:
        try:
            if condition():
                logger.info("Wait condition met")
                return True
        except Exception as e:
            logger.debug(f"Wait condition raised, continuing to poll: {e}")
        wait(poll_interval)

    logger.warning("Wait condition timeout")
    return False


def wait_for_element_count(page: Page, selector: str, expected_count: int, timeout: int = 30000) -> bool:
    return wait_for_condition(lambda: page.locator(selector).count() == expected_count, timeout)


def wait_for_text(locator: Locator, expected_text: str, timeout: int = 30000) -> bool:
    return wait_for_condition(lambda: expected_text in locator.inner_text(), timeout)


def wait_for_attribute_value(
    locator: Locator,
    attribute: str,
    expected_value: str,
    timeout: int = 30000,
) -> bool:
    return wait_for_condition(lambda: locator.get_attribute(attribute) == expected_value, timeout)


def retry_with_backoff(
    action: Callable[[], T],
    max_retries: int = 3,
    initial_delay: int = 1000,
) -> T:
    """Run action up to max_retries times (at least once), doubling the delay after each failure."""
    last_error: Optional[Exception] = None
    delay = initial_delay
    max_retries = max(1, max_retries)

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(f"Attempt {attempt} of {max_retries}")
            return action()
        except Exception as e:
            last_error = e
            logger.warning(f"Attempt {attempt} failed: {e}")
            if attempt < max_retries:
                logger.info(f"Retrying in {delay}ms...")
                wait(delay)
                delay *= 2

    raise HarnessError(
        f"Action failed after {max_retries} attempts. Last error: {last_error}"
    ) from last_error
