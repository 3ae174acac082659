# scripts/send_report_email.py
"""
Email the HTML summary of the last test run.

Run after pytest with --json-report:

    pytest --json-report --json-report-file=reports/test-results.json
    python scripts/send_report_email.py
"""

import sys

from harness.report_email import main

if __name__ == "__main__":
    sys.exit(main())
