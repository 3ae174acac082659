# harness/logger.py
"""
Test logger built on stdlib logging.

FEATURES:
✅ Console output: "[YYYY-MM-DD HH:MM:SS] LEVEL: message"
✅ Optional run-wide files (test-{ts}.log, error-{ts}.log) under LOG_DIR
✅ Per-test log files with start/end banners (attached to the pytest report)
✅ Step / action / API request-response helpers
✅ step() context manager for named test steps

Every harness module logs to a child of the "harness" logger, so the console
handler and any active per-test file receive their records too. Records keep
propagating to the root logger, which is what pytest's caplog listens on.
"""

from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

ROOT_LOGGER_NAME = "harness"
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_CONSOLE_HANDLER_NAME = "harness-console"
_BANNER_WIDTH = 54

STEP_STARTED = "STARTED"
STEP_PASSED = "PASSED"
STEP_FAILED = "FAILED"


def _file_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _level(value: str) -> int:
    name = str(value or "info").upper()
    if name == "WARN":
        name = "WARNING"
    return getattr(logging, name, logging.INFO)


class TestLogger:
    """Facade over the "harness" logger with test-oriented helpers."""

    __test__ = False

    def __init__(
        self,
        level: str = "info",
        log_dir: str | Path = "reports/logs",
        log_to_file: bool = False,
        name: str = ROOT_LOGGER_NAME,
    ):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(_level(level))
        self._run_handlers: list[logging.Handler] = []
        self._test_handler: Optional[logging.FileHandler] = None
        self._current_test_log_file: Optional[Path] = None

        if not any(h.get_name() == _CONSOLE_HANDLER_NAME for h in self._logger.handlers):
            console = logging.StreamHandler()
            console.set_name(_CONSOLE_HANDLER_NAME)
            console.setFormatter(_formatter())
            self._logger.addHandler(console)

        if log_to_file:
            ts = _file_timestamp()
            run_file = logging.FileHandler(self.log_dir / f"test-{ts}.log", encoding="utf-8")
            run_file.setFormatter(_formatter())
            error_file = logging.FileHandler(self.log_dir / f"error-{ts}.log", encoding="utf-8")
            error_file.setLevel(logging.ERROR)
            error_file.setFormatter(_formatter())
            for handler in (run_file, error_file):
                self._logger.addHandler(handler)
                self._run_handlers.append(handler)

    @classmethod
    def from_config(cls, config) -> "TestLogger":
        s = config.settings
        return cls(level=s.log_level, log_dir=s.log_dir, log_to_file=s.log_to_file)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    # ==================== Levels ====================

    @staticmethod
    def _with_meta(message: str, meta: Any) -> str:
        if meta is None:
            return message
        return f"{message} {json.dumps(meta, default=str)}"

    def error(self, message: str, meta: Any = None) -> None:
        self._logger.error(self._with_meta(message, meta))

    def warn(self, message: str, meta: Any = None) -> None:
        self._logger.warning(self._with_meta(message, meta))

    def info(self, message: str, meta: Any = None) -> None:
        self._logger.info(self._with_meta(message, meta))

    def debug(self, message: str, meta: Any = None) -> None:
        self._logger.debug(self._with_meta(message, meta))

    # ==================== Structured helpers ====================

    def log_step(self, step_name: str, status: str) -> None:
        message = f"Test Step [{step_name}] - {status}"
        if status == STEP_FAILED:
            self.error(message)
        else:
            self.info(message)

    def log_action(self, action: str, element: Optional[str] = None) -> None:
        if element:
            self.info(f"Action: {action} on element [{element}]")
        else:
            self.info(f"Action: {action}")

    def log_api_request(self, method: str, endpoint: str, data: Any = None) -> None:
        self.info(f"API Request: {method} {endpoint}", {"data": data} if data is not None else None)

    def log_api_response(self, method: str, endpoint: str, status: int, response_data: Any = None) -> None:
        self.info(f"API Response: {method} {endpoint} - Status: {status}", {"data": response_data})

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Log STARTED, then PASSED or FAILED around the wrapped block."""
        self.log_step(name, STEP_STARTED)
        try:
            yield
        except BaseException:
            self.log_step(name, STEP_FAILED)
            raise
        self.log_step(name, STEP_PASSED)

    # ==================== Per-test log files ====================

    def start_test_log(self, test_name: str, test_id: str) -> Path:
        if self._test_handler is not None:
            self.end_test_log("unknown")

        safe_name = re.sub(r"[^a-z0-9]", "-", test_name.lower())
        path = self.log_dir / f"test-{safe_name}-{_file_timestamp()}.log"
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(_formatter())
        self._logger.addHandler(handler)
        self._test_handler = handler
        self._current_test_log_file = path

        self._banner("TEST STARTED")
        self._logger.info(f"Test: {test_name}")
        self._logger.info(f"Test ID: {test_id}")
        self._logger.info(f"Timestamp: {datetime.now(timezone.utc).isoformat()}")
        self._logger.info("=" * _BANNER_WIDTH)
        return path

    def end_test_log(self, status: str) -> None:
        if self._test_handler is None:
            return
        self._banner("TEST ENDED")
        self._logger.info(f"Status: {status.upper()}")
        self._logger.info(f"Timestamp: {datetime.now(timezone.utc).isoformat()}")
        self._logger.info("=" * _BANNER_WIDTH)
        self._logger.removeHandler(self._test_handler)
        self._test_handler.close()
        self._test_handler = None

    def get_current_test_log_file(self) -> Optional[Path]:
        return self._current_test_log_file

    def _banner(self, title: str) -> None:
        self._logger.info(f" {title} ".center(_BANNER_WIDTH, "="))

    def close(self) -> None:
        """Detach file handlers; the console handler stays for the process."""
        self.end_test_log("unknown")
        for handler in self._run_handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._run_handlers.clear()
