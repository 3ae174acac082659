# harness/pages/__init__.py
"""Page objects and the PageManager that hands them to tests."""

from __future__ import annotations

from typing import Optional

from playwright.sync_api import Page

from harness.config import ConfigManager
from harness.logger import TestLogger
from harness.pages.home_page import HomePage
from harness.pages.login_page import LoginPage
from harness.screenshot_manager import ScreenshotManager


class PageManager:
    """One instance of every page object, sharing page, config and logger."""

    def __init__(
        self,
        page: Page,
        config: ConfigManager,
        screenshots: Optional[ScreenshotManager] = None,
        test_logger: Optional[TestLogger] = None,
    ):
        self.login_page = LoginPage(page, config, screenshots, test_logger)
        self.home_page = HomePage(page, config, screenshots, test_logger)


__all__ = ["HomePage", "LoginPage", "PageManager"]
