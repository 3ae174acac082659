"""Login and home page flows against the configured BASE_URL.

Run with ``pytest -m e2e`` once BASE_URL points at the application.
"""

import pytest

pytestmark = pytest.mark.e2e


@pytest.fixture
def valid_user(test_data):
    return test_data.get_nested_data("testData", "users.validUser")


@pytest.fixture
def logged_in(pages, valid_user):
    pages.login_page.goto()
    pages.login_page.login(valid_user["email"], valid_user["password"])
    pages.home_page.verify_page_loaded()
    return pages


class TestLogin:
    def test_valid_credentials_log_in(self, pages, valid_user):
        pages.login_page.goto()
        pages.login_page.verify_page_loaded()
        pages.login_page.login(valid_user["email"], valid_user["password"])

        pages.home_page.verify_page_loaded()
        assert pages.home_page.is_user_logged_in()

    def test_invalid_credentials_show_error(self, pages, test_data):
        invalid_user = test_data.get_nested_data("testData", "users.invalidUser")

        pages.login_page.goto()
        pages.login_page.login(invalid_user["email"], invalid_user["password"])

        assert pages.login_page.is_error_displayed()

    def test_remember_me_login(self, pages, valid_user):
        pages.login_page.goto()
        pages.login_page.login_with_remember_me(valid_user["email"], valid_user["password"])
        pages.home_page.verify_page_loaded()

    def test_forgot_password_link(self, pages):
        pages.login_page.goto()
        pages.login_page.click_forgot_password()

    def test_sign_up_link(self, pages):
        pages.login_page.goto()
        pages.login_page.click_sign_up()


class TestHomePage:
    def test_welcome_message(self, logged_in, assertions):
        message = logged_in.home_page.get_welcome_message()
        assertions.assert_truthy(message, "Welcome message is shown")

    def test_search(self, logged_in, test_data):
        search_terms = test_data.get_data("testData", "searchTerms")
        logged_in.home_page.search(search_terms[0])

    def test_logout(self, logged_in):
        logged_in.home_page.logout()
        logged_in.login_page.verify_page_loaded()


@pytest.mark.parametrize("user_key", ["validUser", "adminUser"])
def test_login_data_driven(pages, test_data, user_key):
    user = test_data.get_nested_data("testData", f"users.{user_key}")
    pages.login_page.goto()
    pages.login_page.login(user["email"], user["password"])
    pages.home_page.verify_page_loaded()
