# harness/fixtures.py
"""
pytest plugin wiring the harness into tests.

FEATURES:
✅ Session fixtures: config, test_logger, test_data, api_client, api_services,
   screenshot_manager
✅ pytest-playwright overrides: launch args, context args, init script and
   default timeouts
✅ Per-test log file, browser console / page error / request failure logging
✅ Screenshot on failure (or always), recorded into pytest-json-report metadata
✅ Global setup / teardown logging at session start and finish

Enable with ``pytest_plugins = ["harness.fixtures"]`` in the root conftest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError

from harness.api_client import APIClient
from harness.api_services import APIServices
from harness.assertions import Assertions
from harness.config import ConfigManager
from harness.exceptions import ConfigurationError
from harness.logger import TestLogger
from harness.pages import PageManager
from harness.screenshot_manager import ScreenshotManager
from harness.test_data_manager import TestDataManager

logger = logging.getLogger(__name__)

CONFIG_KEY = pytest.StashKey[Optional[ConfigManager]]()
LOGGER_KEY = pytest.StashKey[TestLogger]()
SCREENSHOTS_KEY = pytest.StashKey[List[str]]()
LOG_FILE_KEY = pytest.StashKey[str]()

_INIT_SCRIPT = """
window.localStorage.setItem('cookiesAccepted', 'true');
window.localStorage.setItem('popupsAccepted', 'true');
"""


# ==================== Session lifecycle ====================

def pytest_sessionstart(session: pytest.Session) -> None:
    try:
        config = ConfigManager()
    except ConfigurationError as e:
        # Unit tests that never ask for `config` can still run.
        logging.getLogger("harness").error(f"Configuration invalid: {e}")
        session.config.stash[CONFIG_KEY] = None
        session.config.stash[LOGGER_KEY] = TestLogger()
        return

    test_logger = TestLogger.from_config(config)
    session.config.stash[CONFIG_KEY] = config
    session.config.stash[LOGGER_KEY] = test_logger

    # An explicit --video other than "off" wins over VIDEO_ON_FAILURE.
    if getattr(session.config.option, "video", "off") == "off":
        session.config.option.video = config.settings.video_on_failure

    test_logger.info("=== Global Setup Started ===")
    test_logger.info(f"Environment: {config.get_environment()}")
    test_logger.info(f"Base URL: {config.get_base_url()}")
    test_logger.info(f"API Base URL: {config.get_api_base_url()}")
    test_logger.info("=== Global Setup Completed ===")


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    test_logger = session.config.stash.get(LOGGER_KEY, None)
    if test_logger is None:
        return
    config = session.config.stash.get(CONFIG_KEY, None)
    if config is not None and not config.settings.run_global_teardown:
        test_logger.info("Global teardown skipped (RUN_GLOBAL_TEARDOWN=false)")
    else:
        test_logger.info("=== Global Teardown Started ===")
        test_logger.info(f"Session finished with exit status {int(exitstatus)}")
        test_logger.info("=== Global Teardown Completed ===")
    test_logger.close()


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Store each phase report on the item so fixtures can read the outcome."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


@pytest.hookimpl(optionalhook=True)
def pytest_json_runtest_metadata(item, call) -> Dict[str, Any]:
    """Feed screenshots and the per-test log into pytest-json-report."""
    if call.when != "teardown":
        return {}
    metadata: Dict[str, Any] = {}
    screenshots = item.stash.get(SCREENSHOTS_KEY, [])
    if screenshots:
        metadata["screenshots"] = list(screenshots)
    log_file = item.stash.get(LOG_FILE_KEY, None)
    if log_file:
        metadata["log_file"] = log_file
    return metadata


def outcome_of(node) -> str:
    """passed / failed / skipped for a finished test, "unknown" before the call."""
    for when in ("setup", "call"):
        rep = getattr(node, f"rep_{when}", None)
        if rep is not None and rep.failed:
            return "failed"
    rep_call = getattr(node, "rep_call", None)
    if rep_call is not None:
        return rep_call.outcome
    rep_setup = getattr(node, "rep_setup", None)
    if rep_setup is not None and rep_setup.skipped:
        return "skipped"
    return "unknown"


# ==================== Harness fixtures ====================

@pytest.fixture(scope="session")
def config(pytestconfig) -> ConfigManager:
    cached = pytestconfig.stash.get(CONFIG_KEY, None)
    return cached if cached is not None else ConfigManager()


@pytest.fixture(scope="session")
def test_logger(pytestconfig, config) -> TestLogger:
    cached = pytestconfig.stash.get(LOGGER_KEY, None)
    return cached if cached is not None else TestLogger.from_config(config)


@pytest.fixture(scope="session")
def test_data(config) -> TestDataManager:
    return TestDataManager.from_dir(config.settings.test_data_dir)


@pytest.fixture(scope="session")
def screenshot_manager(config) -> ScreenshotManager:
    return ScreenshotManager(config.settings.screenshot_dir)


@pytest.fixture(scope="session")
def api_client(config, test_logger) -> Iterator[APIClient]:
    client = APIClient.from_config(config, test_logger)
    yield client
    client.close()


@pytest.fixture(scope="session")
def api_services(api_client) -> APIServices:
    return APIServices(api_client)


@pytest.fixture
def assertions(test_logger) -> Assertions:
    return Assertions(test_logger)


# ==================== pytest-playwright overrides ====================

@pytest.fixture(scope="session")
def browser_type_launch_args(browser_type_launch_args, config, pytestconfig) -> Dict[str, Any]:
    args = dict(browser_type_launch_args)
    if not pytestconfig.getoption("--headed", default=False):
        args["headless"] = config.is_headless()
    if config.settings.slow_mo > 0:
        args["slow_mo"] = config.settings.slow_mo
    return args


@pytest.fixture(scope="session")
def browser_context_args(browser_context_args, browser_name, config) -> Dict[str, Any]:
    args = {
        **browser_context_args,
        "viewport": config.get_viewport(),
        "base_url": config.get_base_url(),
        "locale": "en-US",
        "timezone_id": "America/New_York",
        "ignore_https_errors": True,
    }
    # Only Chromium accepts the notifications permission.
    if browser_name == "chromium":
        args["permissions"] = ["geolocation", "notifications"]
    else:
        args["permissions"] = ["geolocation"]
    return args


@pytest.fixture
def context(context, config):
    timeouts = config.get_timeouts()
    context.add_init_script(_INIT_SCRIPT)
    context.set_default_timeout(timeouts["default"])
    context.set_default_navigation_timeout(timeouts["navigation"])
    yield context


def _attach_listeners(page, test_logger: TestLogger) -> None:
    def on_page_error(error) -> None:
        test_logger.error(f"🔥 Page Error: {error.message}")
        if error.stack:
            test_logger.error(f"Stack: {error.stack}")

    def on_console(msg) -> None:
        if msg.type == "error":
            test_logger.error(f"🖥️ Browser Console Error: {msg.text}")
        elif msg.type == "warning":
            test_logger.warn(f"🖥️ Browser Console Warning: {msg.text}")
        elif msg.type in ("log", "info"):
            test_logger.debug(f"🖥️ Browser Console: {msg.text}")

    def on_request_failed(request) -> None:
        test_logger.error(f"❌ Request Failed: {request.url}")
        test_logger.error(f"Failure: {request.failure or 'Unknown error'}")

    page.on("pageerror", on_page_error)
    page.on("console", on_console)
    page.on("crash", lambda _: test_logger.error("💥 Page crashed!"))
    page.on("requestfailed", on_request_failed)


def _capture(page, screenshot_manager: ScreenshotManager, name: str) -> Optional[Path]:
    path = screenshot_manager.get_screenshot_path(name)
    try:
        page.screenshot(path=str(path), full_page=True)
    except PlaywrightError as e:
        logger.warning(f"Screenshot '{name}' failed: {e}")
        return None
    return path


@pytest.fixture
def page(page, request, config, test_logger, screenshot_manager):
    node = request.node
    log_file = test_logger.start_test_log(node.name, node.nodeid)
    node.stash[LOG_FILE_KEY] = str(log_file.resolve())
    screenshot_manager.set_test_directory(node.name)

    test_logger.info(f"🚀 Starting test: {node.name}")
    test_logger.info(f"📂 Test file: {node.path}")
    project = node.callspec.params.get("browser_name", "default") if hasattr(node, "callspec") else "default"
    test_logger.info(f"🔖 Project: {project}")
    _attach_listeners(page, test_logger)

    yield page

    status = outcome_of(node)
    rep_call = getattr(node, "rep_call", None)
    if status == "failed":
        if rep_call is not None and rep_call.longreprtext:
            test_logger.error(f"❌ Test failed:\n{rep_call.longreprtext}")
        test_logger.error(f"❌ Test completed with status: {status}")
    elif status == "passed":
        test_logger.info(f"✅ Test completed with status: {status}")
    else:
        test_logger.warn(f"⚠️ Test completed with status: {status}")

    settings = config.settings
    wants_shot = (status == "failed" and settings.screenshot_on_failure) or (
        status == "passed" and settings.screenshot_on_success
    )
    if wants_shot:
        shot = _capture(page, screenshot_manager, f"{status}-{node.name}")
        if shot is not None:
            node.stash.setdefault(SCREENSHOTS_KEY, []).append(str(shot.resolve()))
            test_logger.info(f"📸 Screenshot saved: {shot}")

    test_logger.end_test_log(status)


@pytest.fixture
def pages(page, config, screenshot_manager, test_logger) -> PageManager:
    return PageManager(page, config, screenshot_manager, test_logger)
