# harness/pages/login_page.py
from __future__ import annotations

from harness.base_page import BasePage


class LoginPage(BasePage):
    path = "/login"

    email_input = "#email"
    password_input = "#password"
    login_button = 'button[type="submit"]'
    error_message = ".error-message"
    remember_me_checkbox = "#remember-me"
    forgot_password_link = 'a[href*="forgot-password"]'
    sign_up_link = 'a[href*="signup"]'

    def goto(self) -> None:
        with self.log.step("Navigate to login page"):
            self.navigate_to(self.path)

    def login(self, email: str, password: str) -> None:
        with self.log.step(f"Login with email: {email}"):
            self.fill(self.email_input, email)
            self.fill(self.password_input, password)
            self.click(self.login_button)
            self.wait_for_load_state("networkidle")

    def login_with_remember_me(self, email: str, password: str) -> None:
        with self.log.step("Login with remember me"):
            self.fill(self.email_input, email)
            self.fill(self.password_input, password)
            self.check(self.remember_me_checkbox)
            self.click(self.login_button)

    def click_forgot_password(self) -> None:
        with self.log.step("Click forgot password"):
            self.click(self.forgot_password_link)

    def click_sign_up(self) -> None:
        with self.log.step("Click sign up"):
            self.click(self.sign_up_link)

    def get_error_message(self) -> str:
        return self.get_text(self.error_message)

    def verify_page_loaded(self) -> None:
        with self.log.step("Verify login page loaded"):
            self.wait_for_element(self.login_button, "visible")
            self.wait_for_element(self.email_input, "visible")

    def is_error_displayed(self) -> bool:
        return self.is_visible(self.error_message)
