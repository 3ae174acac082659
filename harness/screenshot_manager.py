# harness/screenshot_manager.py
"""
Screenshot directory layout:

    {base}/{YYYY-MM-DD}/{sanitized-test-name}/{name}-{timestamp}.png

Page objects ask for paths here; the pytest plugin sets the per-test
directory before each test and attaches failure screenshots to the report.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
MAX_NAME_LENGTH = 50


def _sanitize(test_name: str) -> str:
    return _NON_ALNUM.sub("-", test_name)


class ScreenshotManager:
    def __init__(self, base_dir: str | Path = "screenshots"):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._test_dir: Optional[Path] = None

    def set_test_directory(self, test_name: str) -> Path:
        self._test_dir = self.base_dir / date.today().isoformat() / _sanitize(test_name)
        self._test_dir.mkdir(parents=True, exist_ok=True)
        return self._test_dir

    def get_test_directory(self) -> Optional[Path]:
        return self._test_dir

    def get_screenshot_path(self, name: str, use_test_dir: bool = True) -> Path:
        directory = self._test_dir if use_test_dir and self._test_dir else self.base_dir
        ts = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
        return directory / f"{name}-{ts}.png"

    @staticmethod
    def generate_name(step_name: str) -> str:
        return _NON_ALNUM.sub("-", step_name.lower())[:MAX_NAME_LENGTH]

    def get_test_screenshots(self, test_name: str) -> List[Path]:
        sanitized = _sanitize(test_name)
        found = list(self.base_dir.glob(f"{sanitized}/*.png"))
        found.extend(self.base_dir.glob(f"*/{sanitized}/*.png"))
        return sorted(found)

    def clean_old_screenshots(self, days_old: int = 7) -> int:
        """Remove top-level directories not modified in days_old days."""
        cutoff = time.time() - days_old * 86400
        removed = 0
        try:
            for entry in self.base_dir.iterdir():
                if entry.is_dir() and entry.stat().st_mtime < cutoff:
                    shutil.rmtree(entry, ignore_errors=True)
                    removed += 1
                    logger.info(f"Cleaned old screenshot directory: {entry}")
        except OSError as e:
            logger.error(f"Failed to clean old screenshots: {e}")
        return removed

    def get_total_screenshots(self) -> int:
        if not self.base_dir.exists():
            return 0
        return sum(1 for p in self.base_dir.rglob("*.png") if p.is_file())
