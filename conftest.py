# conftest.py
pytest_plugins = ["harness.fixtures"]
