# harness/report_email.py
"""
Report Emailer

FEATURES:
✅ Reads pytest-json-report output (and Playwright's JSON reporter layout)
✅ Metrics: totals, pass rate, durations, SUCCESS / FAILURE status
✅ Jinja2 HTML email: status badge, metric cards, all tests, slowest tests,
   failures grouped by file with stack traces
✅ SMTP delivery (STARTTLS or implicit TLS) with failure screenshots and the
   raw JSON report attached
✅ Exit code policy for CI (FAIL_ON_TEST_FAILURE / FAIL_ON_PARSE_ERROR)

Configuration comes from the environment (a local .env is loaded first).
"""

from __future__ import annotations

import json
import logging
import os
import re
import smtplib
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.mime.application import MIMEApplication
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from jinja2 import BaseLoader, Environment, select_autoescape

from harness.exceptions import HarnessError, ReportError
from harness.logger import TestLogger

logger = logging.getLogger(__name__)

SUCCESS = "SUCCESS"
FAILURE = "FAILURE"

_STATUS_COLORS = {
    "passed": "#10b981",
    "failed": "#ef4444",
    "timedout": "#ef4444",
    "interrupted": "#ef4444",
    "skipped": "#f59e0b",
    "flaky": "#8b5cf6",
}
_UNKNOWN_COLOR = "#6b7280"

_FAILED_STATUSES = {"failed", "timedout", "interrupted", "unexpected", "error"}
_PROJECT_SUFFIX = re.compile(r"\[([^\]]+)\]$")


# ==================== Configuration ====================

def _required(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    if not value:
        raise ReportError(f"Missing required environment variable: {key}")
    return value


def _text(env: Mapping[str, str], key: str, default: str) -> str:
    return env.get(key) or default


def _flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = env.get(key)
    if not value:
        return default
    return value.lower() == "true"


def _number(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ReportError(f"Environment variable {key} must be an integer, got '{value}'") from e


def _addresses(env: Mapping[str, str], key: str) -> List[str]:
    value = env.get(key) or ""
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class EmailConfig:
    smtp_host: str
    smtp_user: str
    smtp_pass: str
    email_from: str
    smtp_port: int = 587
    smtp_secure: bool = False
    email_to: List[str] = field(default_factory=list)
    email_cc: List[str] = field(default_factory=list)
    email_bcc: List[str] = field(default_factory=list)
    email_subject_prefix: str = "[Test Report]"
    project_name: str = "Playwright Tests"
    test_env: str = "QA"
    report_json_path: str = "./reports/test-results.json"
    screenshot_base_dir: str = "./test-results"
    attach_screenshots: bool = True
    max_screenshot_attachments: int = 10
    fail_on_parse_error: bool = True
    fail_on_test_failure: bool = False
    include_stack_traces: bool = True
    max_error_length: int = 500
    top_slowest_tests: int = 5
    timezone: str = "UTC"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EmailConfig":
        """Build the config from ``env`` or, when omitted, from .env + os.environ."""
        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            smtp_host=_required(env, "SMTP_HOST"),
            smtp_port=_number(env, "SMTP_PORT", 587),
            smtp_secure=_flag(env, "SMTP_SECURE", False),
            smtp_user=_required(env, "SMTP_USER"),
            smtp_pass=_required(env, "SMTP_PASS"),
            email_from=_required(env, "EMAIL_FROM"),
            email_to=_addresses(env, "EMAIL_TO"),
            email_cc=_addresses(env, "EMAIL_CC"),
            email_bcc=_addresses(env, "EMAIL_BCC"),
            email_subject_prefix=_text(env, "EMAIL_SUBJECT_PREFIX", "[Test Report]"),
            project_name=_text(env, "PROJECT_NAME", "Playwright Tests"),
            test_env=_text(env, "TEST_ENV", "QA"),
            report_json_path=_text(env, "REPORT_JSON_PATH", "./reports/test-results.json"),
            screenshot_base_dir=_text(env, "SCREENSHOT_BASE_DIR", "./test-results"),
            attach_screenshots=_flag(env, "ATTACH_SCREENSHOTS", True),
            max_screenshot_attachments=_number(env, "MAX_SCREENSHOT_ATTACHMENTS", 10),
            fail_on_parse_error=_flag(env, "FAIL_ON_PARSE_ERROR", True),
            fail_on_test_failure=_flag(env, "FAIL_ON_TEST_FAILURE", False),
            include_stack_traces=_flag(env, "INCLUDE_STACK_TRACES", True),
            max_error_length=_number(env, "MAX_ERROR_LENGTH", 500),
            top_slowest_tests=_number(env, "TOP_SLOWEST_TESTS", 5),
            timezone=_text(env, "TIMEZONE", "UTC"),
        )


# ==================== Formatting helpers ====================

def format_duration(ms: float) -> str:
    ms = int(ms)
    if ms < 1000:
        return f"{ms}ms"
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s {ms % 1000}ms"


def format_timestamp(iso_string: str, tz: str = "UTC") -> str:
    """Render an ISO timestamp in ``tz``; unparseable input is returned as-is."""
    try:
        moment = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(ZoneInfo(tz)).strftime("%b %d, %Y, %H:%M:%S")
    except (ValueError, KeyError):
        # ZoneInfoNotFoundError is a KeyError
        return iso_string


def truncate_error(message: str, max_length: int) -> str:
    if max_length == 0 or len(message) <= max_length:
        return message
    return message[:max_length] + "... (truncated)"


def get_status_color(status: str) -> str:
    return _STATUS_COLORS.get(status.lower(), _UNKNOWN_COLOR)


def normalize_status(status: str) -> str:
    lowered = status.lower()
    if lowered in ("passed", "xpassed"):
        return "passed"
    if lowered in _FAILED_STATUSES:
        return "failed"
    if lowered in ("skipped", "xfailed"):
        return "skipped"
    if lowered == "flaky":
        return "flaky"
    return "unknown"


# ==================== Data model ====================

@dataclass
class ErrorDetail:
    message: str
    stack: str = ""
    location: Optional[str] = None


@dataclass
class TestDetail:
    __test__ = False

    title: str
    file: str
    status: str
    duration: int
    project_name: str
    error: Optional[ErrorDetail] = None
    screenshots: List[str] = field(default_factory=list)


@dataclass
class TestMetrics:
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    flaky: int = 0
    pass_percentage: int = 0
    total_duration: int = 0
    avg_duration: int = 0
    execution_status: str = SUCCESS

    @classmethod
    def from_tests(cls, tests: List[TestDetail]) -> "TestMetrics":
        total = len(tests)
        counts = {"passed": 0, "failed": 0, "skipped": 0, "flaky": 0}
        for test in tests:
            if test.status in counts:
                counts[test.status] += 1
        total_duration = sum(t.duration for t in tests)
        return cls(
            total=total,
            passed=counts["passed"],
            failed=counts["failed"],
            skipped=counts["skipped"],
            flaky=counts["flaky"],
            pass_percentage=int(counts["passed"] / total * 100 + 0.5) if total else 0,
            total_duration=total_duration,
            avg_duration=int(total_duration / total + 0.5) if total else 0,
            execution_status=SUCCESS if counts["failed"] == 0 else FAILURE,
        )


# ==================== Report parsing ====================

def _format_location(path: Any, line: Any = None, column: Any = None) -> Optional[str]:
    if not path:
        return None
    parts = [str(path)] + [str(p) for p in (line, column) if p is not None]
    return ":".join(parts)


def _pytest_error(entry: Dict[str, Any], config: EmailConfig) -> Optional[ErrorDetail]:
    for phase in ("setup", "call", "teardown"):
        info = entry.get(phase) or {}
        if info.get("outcome") != "failed":
            continue
        crash = info.get("crash") or {}
        longrepr = str(info.get("longrepr") or "")
        message = crash.get("message") or (longrepr.splitlines()[-1] if longrepr else "")
        return ErrorDetail(
            message=truncate_error(message, config.max_error_length),
            stack=longrepr if config.include_stack_traces else "",
            location=_format_location(crash.get("path"), crash.get("lineno")),
        )
    return None


def _parse_pytest_tests(data: Dict[str, Any], config: EmailConfig) -> List[TestDetail]:
    tests: List[TestDetail] = []
    for entry in data.get("tests", []):
        nodeid = entry.get("nodeid", "")
        parts = nodeid.split("::")
        title = parts[-1] if len(parts) >= 2 else nodeid
        match = _PROJECT_SUFFIX.search(title)
        status = normalize_status(entry.get("outcome", ""))
        seconds = sum(
            (entry.get(phase) or {}).get("duration", 0) or 0
            for phase in ("setup", "call", "teardown")
        )
        metadata = entry.get("metadata") or {}
        tests.append(
            TestDetail(
                title=title,
                file=parts[0],
                status=status,
                duration=int(round(seconds * 1000)),
                project_name=match.group(1) if match else "default",
                error=_pytest_error(entry, config) if status == "failed" else None,
                screenshots=list(metadata.get("screenshots") or []),
            )
        )
    return tests


def _parse_playwright_suite(suite: Dict[str, Any], config: EmailConfig, out: List[TestDetail]) -> None:
    for spec in suite.get("specs") or []:
        for test in spec.get("tests") or []:
            results = test.get("results") or []
            latest = results[-1] if results else {}
            status = normalize_status(latest.get("status", ""))
            screenshots = [
                a["path"]
                for a in latest.get("attachments") or []
                if a.get("path") and (a.get("contentType") == "image/png" or a.get("name") == "screenshot")
            ]
            error = None
            raw_error = latest.get("error")
            if status == "failed" and raw_error:
                location = raw_error.get("location") or {}
                error = ErrorDetail(
                    message=truncate_error(raw_error.get("message", ""), config.max_error_length),
                    stack=raw_error.get("stack", "") if config.include_stack_traces else "",
                    location=_format_location(location.get("file"), location.get("line"), location.get("column")),
                )
            out.append(
                TestDetail(
                    title=spec.get("title", ""),
                    file=spec.get("file", ""),
                    status=status,
                    duration=int(latest.get("duration") or 0),
                    project_name=test.get("projectName", ""),
                    error=error,
                    screenshots=screenshots,
                )
            )
    for nested in suite.get("suites") or []:
        _parse_playwright_suite(nested, config, out)


def parse_report(
    report_path: str | Path, config: EmailConfig
) -> Tuple[TestMetrics, List[TestDetail], Dict[str, Any]]:
    """Return ``(metrics, tests, run_info)`` for a JSON test report."""
    path = Path(report_path)
    logger.info(f"📖 Reading report from: {path}")
    if not path.exists():
        raise ReportError(f"Report file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ReportError(f"Failed to read or parse report: {path}. Error: {e}") from e

    if isinstance(data, dict) and "tests" in data:
        tests = _parse_pytest_tests(data, config)
        created = data.get("created")
        run_info = {
            "start_time": datetime.fromtimestamp(created, timezone.utc).isoformat() if created else "",
            "duration": int(round((data.get("duration") or 0) * 1000)),
        }
    elif isinstance(data, dict) and "suites" in data:
        tests = []
        for suite in data["suites"]:
            _parse_playwright_suite(suite, config, tests)
        stats = data.get("stats") or {}
        run_info = {
            "start_time": stats.get("startTime", ""),
            "duration": int(stats.get("duration") or 0),
        }
    else:
        raise ReportError(f"Unrecognized report format: {path}")

    metrics = TestMetrics.from_tests(tests)
    if not run_info["duration"]:
        run_info["duration"] = metrics.total_duration
    logger.info(
        f"✅ Parsed {metrics.total} tests: {metrics.passed} passed, "
        f"{metrics.failed} failed, {metrics.skipped} skipped"
    )
    return metrics, tests, run_info


# ==================== HTML Template ====================

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<title>{{ config.project_name }} - Test Report</title>
<style>
  body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; background:#f3f4f6; color:#1f2937; margin:0; padding:20px; }
  .container { max-width: 1000px; margin: 0 auto; background:#fff; border-radius: 12px; overflow:hidden; box-shadow: 0 4px 12px rgba(0,0,0,0.08); }
  .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color:#fff; padding: 30px; }
  .header h1 { margin: 0 0 10px 0; font-size: 26px; }
  .header p { margin: 4px 0; opacity: 0.95; }
  .status-badge { display:inline-block; margin-top: 12px; padding: 8px 18px; border-radius: 20px; font-weight: 700; }
  .status-success { background:#10b981; }
  .status-partial { background:#f59e0b; }
  .status-failure { background:#ef4444; }
  .metrics { display:flex; flex-wrap: wrap; gap: 12px; padding: 24px; }
  .metric-card { flex: 1; min-width: 120px; background:#f9fafb; border-radius: 8px; padding: 16px; border-top: 4px solid #6b7280; text-align:center; }
  .metric-card.passed { border-top-color:#10b981; }
  .metric-card.failed { border-top-color:#ef4444; }
  .metric-card.skipped { border-top-color:#f59e0b; }
  .metric-card.flaky { border-top-color:#8b5cf6; }
  .metric-card.rate { border-top-color:#3b82f6; }
  .metric-label { font-size: 12px; color:#6b7280; text-transform: uppercase; }
  .metric-value { font-size: 28px; font-weight: 700; margin-top: 6px; }
  .section { padding: 0 24px 24px 24px; }
  .section-title { font-size: 18px; border-bottom: 2px solid #e5e7eb; padding-bottom: 8px; }
  table { width: 100%; border-collapse: collapse; font-size: 13px; }
  th, td { padding: 8px 10px; border-bottom: 1px solid #e5e7eb; text-align: left; }
  th { background:#f9fafb; font-weight: 600; }
  .status-pill { display:inline-block; padding: 2px 10px; border-radius: 10px; color:#fff; font-size: 12px; font-weight: 600; }
  .file-path { font-family: monospace; background:#f3f4f6; padding: 4px 8px; border-radius: 4px; }
  .error-box { background:#fef2f2; border-left: 4px solid #ef4444; padding: 12px; border-radius: 4px; margin-top: 8px; }
  .error-message { color:#991b1b; font-weight: 600; white-space: pre-wrap; }
  .error-stack { font-family: monospace; font-size: 12px; white-space: pre-wrap; margin-top: 8px; color:#374151; }
  .footer { text-align:center; color:#6b7280; font-size: 12px; padding: 20px; border-top: 1px solid #e5e7eb; }
</style>
</head>
<body>
<div class="container">
  <div class="header">
    <h1>🎭 {{ config.project_name }}</h1>
    <p><strong>Environment:</strong> {{ config.test_env }}</p>
    <p><strong>Execution Time:</strong> {{ execution_time }}</p>
    <p><strong>Total Duration:</strong> {{ run_info.duration | duration }}</p>
    <div class="status-badge status-{{ badge.css }}">{{ badge.label }}</div>
  </div>

  <div class="metrics">
    <div class="metric-card total"><div class="metric-label">Total Tests</div><div class="metric-value">{{ metrics.total }}</div></div>
    <div class="metric-card passed"><div class="metric-label">Passed</div><div class="metric-value">{{ metrics.passed }}</div></div>
    <div class="metric-card failed"><div class="metric-label">Failed</div><div class="metric-value">{{ metrics.failed }}</div></div>
    <div class="metric-card skipped"><div class="metric-label">Skipped</div><div class="metric-value">{{ metrics.skipped }}</div></div>
    {% if metrics.flaky > 0 %}
    <div class="metric-card flaky"><div class="metric-label">Flaky</div><div class="metric-value">{{ metrics.flaky }}</div></div>
    {% endif %}
    <div class="metric-card rate"><div class="metric-label">Pass Rate</div><div class="metric-value">{{ metrics.pass_percentage }}%</div></div>
  </div>

  {% if tests %}
  <div class="section">
    <h2 class="section-title">📋 All Tests</h2>
    <table>
      <thead><tr><th>Test</th><th>File</th><th>Project</th><th>Duration</th><th>Status</th></tr></thead>
      <tbody>
      {% for test in tests %}
        <tr>
          <td>{{ test.title }}</td>
          <td>{{ test.file | basename }}</td>
          <td>{{ test.project_name }}</td>
          <td>{{ test.duration | duration }}</td>
          <td><span class="status-pill" style="background: {{ test.status | status_color }};">{{ test.status | upper }}</span></td>
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>
  {% endif %}

  {% if slowest %}
  <div class="section">
    <h2 class="section-title">🐢 Top {{ slowest | length }} Slowest Tests</h2>
    <table>
      <thead><tr><th>#</th><th>Test</th><th>File</th><th>Duration</th></tr></thead>
      <tbody>
      {% for test in slowest %}
        <tr>
          <td>{{ loop.index }}</td>
          <td>{{ test.title }}</td>
          <td><span class="file-path">{{ test.file }}</span></td>
          <td>{{ test.duration | duration }}</td>
        </tr>
      {% endfor %}
      </tbody>
    </table>
  </div>
  {% endif %}

  {% if failure_groups %}
  <div class="section">
    <h2 class="section-title">🔴 Failing Tests Summary</h2>
    {% for file, failures in failure_groups.items() %}
    <div style="margin-bottom: 30px;">
      <div class="file-path" style="display: inline-block; margin-bottom: 10px;">📄 {{ file }}</div>
      {% for test in failures %}
      <div style="margin-left: 20px; margin-bottom: 20px;">
        <strong>{{ test.title }}</strong>
        <div style="font-size: 13px; color: #6b7280; margin: 5px 0;">
          Project: {{ test.project_name }} | Duration: {{ test.duration | duration }}
        </div>
        {% if test.error %}
        <div class="error-box">
          <div class="error-message">❌ {{ test.error.message }}</div>
          {% if test.error.location %}<div style="font-size: 12px; margin: 5px 0;">📍 {{ test.error.location }}</div>{% endif %}
          {% if config.include_stack_traces and test.error.stack %}
          <details style="margin-top: 10px;">
            <summary style="cursor: pointer; font-weight: 600;">View Stack Trace</summary>
            <div class="error-stack">{{ test.error.stack }}</div>
          </details>
          {% endif %}
        </div>
        {% endif %}
        {% if test.screenshots %}
        <div style="font-size: 12px; color: #6b7280; margin-top: 5px;">📸 Screenshot(s): {{ test.screenshots | length }} attached</div>
        {% endif %}
      </div>
      {% endfor %}
    </div>
    {% endfor %}
  </div>
  {% endif %}

  <div class="footer">
    <p>Generated by Test Report Emailer | {{ generated_at }}</p>
    <p>This is an automated test report. Please do not reply to this email.</p>
  </div>
</div>
</body>
</html>
"""

_env = Environment(
    loader=BaseLoader(),
    autoescape=select_autoescape(enabled_extensions=("html", "xml"), default_for_string=True),
    enable_async=False,
)
_env.filters["duration"] = format_duration
_env.filters["status_color"] = get_status_color
_env.filters["basename"] = lambda p: Path(p).name if p else ""


def _status_badge(metrics: TestMetrics) -> Dict[str, str]:
    if metrics.failed == 0:
        return {"css": "success", "label": "✅ Passed"}
    if metrics.passed > 0:
        return {"css": "partial", "label": "⚠️ Partial"}
    return {"css": "failure", "label": "❌ Failed"}


def group_failures(tests: List[TestDetail]) -> Dict[str, List[TestDetail]]:
    groups: Dict[str, List[TestDetail]] = {}
    for test in tests:
        if test.status == "failed":
            groups.setdefault(test.file, []).append(test)
    return groups


def generate_html_report(
    metrics: TestMetrics,
    tests: List[TestDetail],
    run_info: Dict[str, Any],
    config: EmailConfig,
) -> str:
    start_time = run_info.get("start_time") or datetime.now(timezone.utc).isoformat()
    slowest = []
    if config.top_slowest_tests > 0:
        slowest = sorted(tests, key=lambda t: t.duration, reverse=True)[: config.top_slowest_tests]
    return _env.from_string(_HTML_TEMPLATE).render(
        config=config,
        metrics=metrics,
        tests=tests,
        run_info=run_info,
        badge=_status_badge(metrics),
        slowest=slowest,
        failure_groups=group_failures(tests),
        execution_time=format_timestamp(start_time, config.timezone),
        generated_at=format_timestamp(datetime.now(timezone.utc).isoformat(), config.timezone),
    )


# ==================== Email delivery ====================

def build_subject(metrics: TestMetrics, config: EmailConfig) -> str:
    emoji = "✅" if metrics.execution_status == SUCCESS else "❌"
    return (
        f"{config.email_subject_prefix} [{config.project_name}][{config.test_env}] "
        f"{emoji} {metrics.execution_status} — {metrics.passed} passed, "
        f"{metrics.failed} failed — {format_duration(metrics.total_duration)}"
    )


def collect_screenshots(tests: List[TestDetail], config: EmailConfig) -> List[Path]:
    """Existing screenshot files of failed tests, capped at the attachment limit."""
    found: List[Path] = []
    if not config.attach_screenshots:
        return found
    limit = config.max_screenshot_attachments
    for test in tests:
        if test.status != "failed":
            continue
        for raw in test.screenshots:
            if len(found) >= limit:
                logger.warning(f"⚠️ Reached maximum screenshot attachment limit ({limit})")
                return found
            path = Path(raw)
            if not path.is_absolute():
                path = Path(config.screenshot_base_dir) / path
            if path.exists():
                found.append(path)
                logger.info(f"📎 Attaching screenshot: {path.name}")
            else:
                logger.warning(f"⚠️ Screenshot not found: {path}")
    return found


def build_message(
    html: str,
    metrics: TestMetrics,
    tests: List[TestDetail],
    config: EmailConfig,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = build_subject(metrics, config)
    msg["From"] = config.email_from
    msg["To"] = ", ".join(config.email_to)
    if config.email_cc:
        msg["Cc"] = ", ".join(config.email_cc)
    msg.attach(MIMEText(html, "html", "utf-8"))

    for path in collect_screenshots(tests, config):
        image = MIMEImage(path.read_bytes(), _subtype="png")
        image.add_header("Content-Disposition", "attachment", filename=path.name)
        msg.attach(image)

    report = Path(config.report_json_path)
    if report.exists():
        part = MIMEApplication(report.read_bytes(), _subtype="json")
        part.add_header("Content-Disposition", "attachment", filename="test-results.json")
        msg.attach(part)
        logger.info("📎 Attaching JSON report")
    return msg


def _connect(config: EmailConfig) -> smtplib.SMTP:
    if config.smtp_secure:
        return smtplib.SMTP_SSL(config.smtp_host, config.smtp_port, context=ssl.create_default_context())
    server = smtplib.SMTP(config.smtp_host, config.smtp_port)
    server.starttls(context=ssl.create_default_context())
    return server


def send_email(
    html: str,
    metrics: TestMetrics,
    tests: List[TestDetail],
    config: EmailConfig,
    smtp_factory: Optional[Callable[[EmailConfig], Any]] = None,
) -> MIMEMultipart:
    """Send the report and return the message that went out."""
    recipients = config.email_to + config.email_cc + config.email_bcc
    if not recipients:
        raise ReportError("No recipients configured (EMAIL_TO / EMAIL_CC / EMAIL_BCC)")

    msg = build_message(html, metrics, tests, config)
    server = (smtp_factory or _connect)(config)
    try:
        server.login(config.smtp_user, config.smtp_pass)
        logger.info(f"📤 Sending email to: {', '.join(config.email_to)}")
        server.sendmail(config.email_from, recipients, msg.as_string())
    finally:
        server.quit()
    logger.info("✅ Email sent successfully!")
    return msg


# ==================== Entry point ====================

def _log_summary(metrics: TestMetrics) -> None:
    rule = "═" * 50
    logger.info("📊 EXECUTION SUMMARY")
    logger.info(rule)
    logger.info(f"Status:       {metrics.execution_status}")
    logger.info(f"Total Tests:  {metrics.total}")
    logger.info(f"Passed:       {metrics.passed}")
    logger.info(f"Failed:       {metrics.failed}")
    logger.info(f"Skipped:      {metrics.skipped}")
    logger.info(f"Pass Rate:    {metrics.pass_percentage}%")
    logger.info(f"Duration:     {format_duration(metrics.total_duration)}")
    logger.info(rule)


def main(
    env: Optional[Mapping[str, str]] = None,
    smtp_factory: Optional[Callable[[EmailConfig], Any]] = None,
) -> int:
    """Parse the report, email it and return the process exit code."""
    TestLogger(level=os.getenv("LOG_LEVEL", "info"))
    logger.info("🚀 Starting test report emailer")

    config: Optional[EmailConfig] = None
    try:
        config = EmailConfig.from_env(env)
        logger.info(f"⚙️ Project: {config.project_name} | Environment: {config.test_env}")
        logger.info(f"⚙️ Report Path: {config.report_json_path}")

        metrics, tests, run_info = parse_report(config.report_json_path, config)
        html = generate_html_report(metrics, tests, run_info, config)
        send_email(html, metrics, tests, config, smtp_factory=smtp_factory)
        _log_summary(metrics)
    except (HarnessError, OSError, ValueError) as e:
        logger.error(f"❌ ERROR: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        fail = config.fail_on_parse_error if config else True
        return 1 if fail else 0

    if config.fail_on_test_failure and metrics.failed > 0:
        logger.warning("⚠️ Tests failed. Exiting with code 1 (FAIL_ON_TEST_FAILURE=true)")
        return 1
    logger.info("✅ Email report sent successfully!")
    return 0
