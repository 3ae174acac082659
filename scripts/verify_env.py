# scripts/verify_env.py
"""
Verify environment variables are loaded and mapped onto the harness config.

Prints each variable, its raw value, the value the harness will use and its
type. Exits 1 when the configuration does not validate.
"""

import os
import sys

from dotenv import load_dotenv

from harness.config import ConfigManager
from harness.exceptions import ConfigurationError

CHECKS = [
    ("ENVIRONMENT", "environment", "Environment name (dev/staging/prod)"),
    ("BASE_URL", "base_url", "Base URL for UI testing"),
    ("API_BASE_URL", "api_base_url", "Base URL for API testing"),
    ("DEFAULT_TIMEOUT", "default_timeout", "Default timeout in milliseconds"),
    ("NAVIGATION_TIMEOUT", "navigation_timeout", "Navigation timeout in milliseconds"),
    ("ACTION_TIMEOUT", "action_timeout", "Action timeout in milliseconds"),
    ("HEADLESS", "headless", "Run browser in headless mode"),
    ("BROWSER", "browser", "Browser type (chromium/firefox/webkit)"),
    ("VIEWPORT_WIDTH", "viewport_width", "Viewport width"),
    ("VIEWPORT_HEIGHT", "viewport_height", "Viewport height"),
    ("SLOW_MO", "slow_mo", "Slow down operations by N ms"),
    ("PARALLEL_WORKERS", "parallel_workers", "Number of parallel workers"),
    ("RETRIES", "retries", "Retries for failed tests"),
    ("LOG_LEVEL", "log_level", "Logging level"),
    ("LOG_TO_FILE", "log_to_file", "Write run-wide log files"),
    ("SCREENSHOT_ON_FAILURE", "screenshot_on_failure", "Screenshot failed tests"),
    ("SCREENSHOT_ON_SUCCESS", "screenshot_on_success", "Screenshot passed tests"),
    ("TEST_DATA_DIR", "test_data_dir", "Directory holding JSON test data"),
    ("API_TIMEOUT", "api_timeout", "API request timeout in milliseconds"),
    ("API_MAX_RETRIES", "api_max_retries", "API retry budget"),
]


def main() -> int:
    load_dotenv()
    print("\n=== Environment Variables Verification ===\n")

    try:
        config = ConfigManager()
    except ConfigurationError as e:
        print(f"❌ Configuration invalid: {e}")
        return 1

    for env_name, key, description in CHECKS:
        raw = os.environ.get(env_name)
        mapped = config.get(key)
        marker = "✅" if raw is not None else "➖"
        print(f"{marker} {env_name}")
        print(f"   Description: {description}")
        print(f"   Env Value:   {raw if raw is not None else '(not set, default used)'}")
        print(f"   Mapped:      {mapped!r} ({type(mapped).__name__})")

    print("\n=== Summary ===")
    print(repr(config))
    print("✅ Configuration is valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())
