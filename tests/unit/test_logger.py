"""Tests for TestLogger: formatting helpers, step context and per-test files."""

import logging

import pytest

from harness.logger import STEP_FAILED, STEP_PASSED, STEP_STARTED, TestLogger


@pytest.fixture
def test_logger(tmp_path):
    log = TestLogger(level="debug", log_dir=tmp_path / "logs", name="harness.unit")
    yield log
    log.close()


def test_meta_is_appended_as_json(test_logger, caplog):
    with caplog.at_level(logging.INFO, logger="harness.unit"):
        test_logger.info("Created user", {"id": 7})
    assert 'Created user {"id": 7}' in caplog.text


def test_log_action_with_and_without_element(test_logger, caplog):
    with caplog.at_level(logging.INFO, logger="harness.unit"):
        test_logger.log_action("Click", "#submit")
        test_logger.log_action("Reload page")
    assert "Action: Click on element [#submit]" in caplog.text
    assert "Action: Reload page" in caplog.text


def test_log_api_response(test_logger, caplog):
    with caplog.at_level(logging.INFO, logger="harness.unit"):
        test_logger.log_api_response("GET", "/users", 200, [{"id": 1}])
    assert "API Response: GET /users - Status: 200" in caplog.text


def test_failed_step_logs_at_error(test_logger, caplog):
    with caplog.at_level(logging.INFO, logger="harness.unit"):
        test_logger.log_step("Login", STEP_FAILED)
    assert caplog.records[-1].levelno == logging.ERROR


def test_step_context_manager(test_logger, caplog):
    with caplog.at_level(logging.INFO, logger="harness.unit"):
        with test_logger.step("Open page"):
            pass
        with pytest.raises(ValueError):
            with test_logger.step("Break"):
                raise ValueError("boom")
    messages = [r.getMessage() for r in caplog.records]
    assert f"Test Step [Open page] - {STEP_STARTED}" in messages
    assert f"Test Step [Open page] - {STEP_PASSED}" in messages
    assert f"Test Step [Break] - {STEP_FAILED}" in messages


def test_per_test_log_file(test_logger):
    path = test_logger.start_test_log("Login Works!", "tests/test_login.py::test_login")
    assert path.name.startswith("test-login-works--")
    test_logger.info("inside the test")
    test_logger.end_test_log("passed")
    test_logger.info("after the test")

    content = path.read_text(encoding="utf-8")
    assert "TEST STARTED" in content
    assert "Test ID: tests/test_login.py::test_login" in content
    assert "inside the test" in content
    assert "Status: PASSED" in content
    assert "after the test" not in content
    assert test_logger.get_current_test_log_file() == path


def test_run_files_when_logging_to_file(tmp_path):
    log = TestLogger(level="info", log_dir=tmp_path, log_to_file=True, name="harness.unit-files")
    log.info("hello")
    log.error("bad thing")
    log.close()
    run_file = next(tmp_path.glob("test-*.log"))
    error_file = next(tmp_path.glob("error-*.log"))
    assert "hello" in run_file.read_text(encoding="utf-8")
    errors = error_file.read_text(encoding="utf-8")
    assert "bad thing" in errors and "hello" not in errors


def test_console_handler_added_once(tmp_path):
    TestLogger(log_dir=tmp_path, name="harness.unit-once")
    TestLogger(log_dir=tmp_path, name="harness.unit-once")
    handlers = logging.getLogger("harness.unit-once").handlers
    assert len([h for h in handlers if h.get_name() == "harness-console"]) == 1
