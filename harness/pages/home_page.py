# harness/pages/home_page.py
from __future__ import annotations

from harness.base_page import BasePage


class HomePage(BasePage):
    path = "/"

    welcome_message = "h1.welcome"
    user_profile_menu = "#user-profile"
    logout_button = "button#logout"
    search_input = 'input[type="search"]'
    navigation_menu = "nav.main-menu"
    notification_bell = "#notifications"
    settings_icon = "#settings"

    def goto(self) -> None:
        with self.log.step("Navigate to home page"):
            self.navigate_to(self.path)

    def get_welcome_message(self) -> str:
        return self.get_text(self.welcome_message)

    def logout(self) -> None:
        with self.log.step("Logout user"):
            self.click(self.user_profile_menu)
            self.click(self.logout_button)

    def search(self, query: str) -> None:
        with self.log.step(f"Search for: {query}"):
            self.fill(self.search_input, query)
            self.press_key("Enter")

    def click_notifications(self) -> None:
        with self.log.step("Click notifications"):
            self.click(self.notification_bell)

    def navigate_to_settings(self) -> None:
        with self.log.step("Navigate to settings"):
            self.click(self.settings_icon)

    def verify_page_loaded(self) -> None:
        with self.log.step("Verify home page loaded"):
            self.wait_for_element(self.welcome_message, "visible")
            self.wait_for_element(self.navigation_menu, "visible")

    def is_user_logged_in(self) -> bool:
        return self.is_visible(self.user_profile_menu)
