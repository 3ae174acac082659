# harness/base_page.py
"""
BasePage: shared Playwright interactions for page objects.

Every interaction:
✅ logs the action (and the element it targets)
✅ waits for the element to be actionable before acting
✅ retries flaky interactions with exponential backoff
✅ on failure: logs, saves a full-page screenshot, raises
   ElementNotFoundException (interactions) or TimeoutException (waits)

Selectors may be CSS/text/xpath strings or ready-made Locators.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Tuple, Union

from playwright.sync_api import Dialog, FrameLocator, Locator, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PWTimeout

from harness.config import ConfigManager
from harness.exceptions import ElementNotFoundException, HarnessError, TimeoutException
from harness.helpers.wait_helper import retry_with_backoff, wait_for_condition
from harness.logger import TestLogger
from harness.screenshot_manager import ScreenshotManager


Target = Union[str, Locator]
ElementState = Literal["visible", "hidden", "attached", "detached"]
SwipeDirection = Literal["left", "right", "up", "down"]

VISIBLE_TIMEOUT_MS = 10000
ENABLED_TIMEOUT_MS = 5000
WAIT_FOR_ELEMENT_TIMEOUT_MS = 30000
DOWNLOAD_TIMEOUT_MS = 30000
DOWNLOAD_DIR = Path("downloads")

_FORM_DATA_JS = """
(root) => {
  const values = {};
  for (const el of root.querySelectorAll('input, select, textarea')) {
    const name = el.getAttribute('name') || el.getAttribute('id') || el.getAttribute('data-testid');
    if (!name) continue;
    if (el.type === 'checkbox' || el.type === 'radio') {
      values[name] = String(el.checked);
    } else {
      values[name] = el.value ?? '';
    }
  }
  return values;
}
"""

_IN_VIEWPORT_JS = """
(el) => {
  const r = el.getBoundingClientRect();
  return r.top >= 0 && r.left >= 0 &&
    r.bottom <= (window.innerHeight || document.documentElement.clientHeight) &&
    r.right <= (window.innerWidth || document.documentElement.clientWidth);
}
"""

_ALL_ATTRIBUTES_JS = """
(el) => Object.fromEntries(Array.from(el.attributes).map(a => [a.name, a.value]))
"""


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")


@dataclass
class DialogResult:
    """Filled in when the dialog actually fires."""
    message: str = ""
    handled: bool = False


class BasePage:
    def __init__(
        self,
        page: Page,
        config: ConfigManager,
        screenshots: Optional[ScreenshotManager] = None,
        test_logger: Optional[TestLogger] = None,
    ):
        self.page = page
        self.config = config
        self.screenshots = screenshots or ScreenshotManager(config.settings.screenshot_dir)
        self.log = test_logger or TestLogger()

    # ==================== Internals ====================

    def _resolve(self, target: Target) -> Tuple[Locator, str]:
        if isinstance(target, str):
            return self.page.locator(target), target
        return target, "element"

    @contextmanager
    def _guard(
        self,
        action: str,
        label: str,
        tag: str,
        error: type[HarnessError] = ElementNotFoundException,
    ) -> Iterator[None]:
        """Log the action; on failure screenshot and re-raise as a harness error."""
        self.log.log_action(action, label)
        try:
            yield
        except (PlaywrightError, HarnessError) as e:
            self.log.error(f"Failed: {action} on {label}: {e}")
            self.take_screenshot(f"{tag}-error")
            message = f"{action} failed on {label}: {e}"
            if error is ElementNotFoundException:
                raise ElementNotFoundException(label, message) from e
            raise error(message) from e

    @staticmethod
    def _ensure_enabled(element: Locator, label: str) -> None:
        element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
        if not element.is_enabled():
            raise HarnessError(f"Element {label} is not enabled")

    def _wait_enabled(self, element: Locator) -> None:
        element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
        wait_for_condition(element.is_enabled, ENABLED_TIMEOUT_MS, 200)

    # ==================== Navigation ====================

    def navigate_to(self, url: str) -> None:
        if url.startswith(("http://", "https://")):
            full_url = url
        else:
            full_url = self.config.get_base_url().rstrip("/") + "/" + url.lstrip("/")
        with self._guard("Navigate", full_url, "navigation", HarnessError):
            retry_with_backoff(
                lambda: self.page.goto(full_url, wait_until="domcontentloaded"), 2, 1000
            )
            self.log.info(f"Successfully navigated to: {full_url}")

    def reload(self) -> None:
        with self._guard("Reload page", "page", "reload", HarnessError):
            self.page.reload(wait_until="domcontentloaded")

    def go_back(self) -> None:
        with self._guard("Go back", "page", "goback", HarnessError):
            self.page.go_back(wait_until="domcontentloaded")

    def go_forward(self) -> None:
        with self._guard("Go forward", "page", "goforward", HarnessError):
            self.page.go_forward(wait_until="domcontentloaded")

    def wait_for_url(self, url: Union[str, Any], timeout: Optional[float] = None) -> None:
        with self._guard("Wait for URL", str(url), "waiturl", TimeoutException):
            self.page.wait_for_url(url, timeout=timeout)

    def wait_for_load_state(self, state: Literal["load", "domcontentloaded", "networkidle"] = "load") -> None:
        with self._guard("Wait for load state", state, "loadstate", TimeoutException):
            self.page.wait_for_load_state(state)

    def wait_for_timeout(self, milliseconds: float) -> None:
        self.page.wait_for_timeout(milliseconds)

    def get_page_title(self) -> str:
        return self.page.title()

    def get_current_url(self) -> str:
        return self.page.url

    # ==================== Clicks ====================

    def click(self, target: Target, **options: Any) -> None:
        element, label = self._resolve(target)
        with self._guard("Click", label, "click"):
            def attempt() -> None:
                self._ensure_enabled(element, label)
                element.click(**options)
            retry_with_backoff(attempt, 2, 500)
            self.log.info(f"Clicked on element: {label}")

    def double_click(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Double click", label, "doubleclick"):
            def attempt() -> None:
                self._ensure_enabled(element, label)
                element.dblclick()
            retry_with_backoff(attempt, 2, 500)

    def right_click(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Right click", label, "rightclick"):
            self._ensure_enabled(element, label)
            element.click(button="right")

    def click_with_coordinates(self, target: Target, x: float, y: float) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Click at ({x}, {y})", label, "coordclick"):
            self._ensure_enabled(element, label)
            element.click(position={"x": x, "y": y})

    def multi_click(self, target: Target, count: int) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Click x{count}", label, "multiclick"):
            self._ensure_enabled(element, label)
            element.click(click_count=count)

    def click_with_modifier(self, target: Target, modifiers: Sequence[str]) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Click with {'+'.join(modifiers)}", label, "modclick"):
            self._ensure_enabled(element, label)
            element.click(modifiers=list(modifiers))

    # ==================== Input ====================

    def fill(self, target: Target, text: str) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Fill text: {text}", label, "fill"):
            def attempt() -> None:
                self._wait_enabled(element)
                element.fill(text)
            retry_with_backoff(attempt, 2, 500)

    def clear(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Clear", label, "clear"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            if not element.is_editable():
                raise HarnessError(f"Element {label} is not editable")
            element.clear()

    def type(self, target: Target, text: str, delay: float = 50) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Type text: {text}", label, "type"):
            def attempt() -> None:
                self._wait_enabled(element)
                element.press_sequentially(text, delay=delay)
            retry_with_backoff(attempt, 2, 500)

    def type_with_pause(self, target: Target, chunks: Sequence[str], pause_ms: float = 300, delay: float = 50) -> None:
        element, label = self._resolve(target)
        with self._guard("Type with pauses", label, "typepause"):
            self._wait_enabled(element)
            for chunk in chunks:
                element.press_sequentially(chunk, delay=delay)
                self.page.wait_for_timeout(pause_ms)

    def clear_and_fill(self, target: Target, text: str) -> None:
        self.clear(target)
        self.fill(target, text)

    def press_key(self, key: str) -> None:
        with self._guard(f"Press key: {key}", "keyboard", "presskey", HarnessError):
            self.page.keyboard.press(key)

    def keyboard_shortcut(self, keys: Sequence[str]) -> None:
        combo = "+".join(keys)
        with self._guard(f"Keyboard shortcut: {combo}", "keyboard", "shortcut", HarnessError):
            self.page.keyboard.press(combo)

    def select_option(self, target: Target, value: Union[str, Sequence[str]]) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Select option: {value}", label, "select"):
            def attempt() -> None:
                self._ensure_enabled(element, label)
                element.select_option(value)
            retry_with_backoff(attempt, 2, 500)

    def select_by_label(self, target: Target, option_label: Union[str, Sequence[str]]) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Select by label: {option_label}", label, "selectlabel"):
            self._ensure_enabled(element, label)
            element.select_option(label=option_label)

    def select_by_value(self, target: Target, value: Union[str, Sequence[str]]) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Select by value: {value}", label, "selectvalue"):
            self._ensure_enabled(element, label)
            element.select_option(value=value)

    def check(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Check", label, "check"):
            self._ensure_enabled(element, label)
            element.check()

    def uncheck(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Uncheck", label, "uncheck"):
            self._ensure_enabled(element, label)
            element.uncheck()

    def hover(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Hover", label, "hover"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            element.hover()

    def focus(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Focus", label, "focus"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            element.focus()

    def blur(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Blur", label, "blur"):
            element.blur()

    def drag_and_drop(self, source: Target, destination: Target) -> None:
        src, src_label = self._resolve(source)
        dst, dst_label = self._resolve(destination)
        with self._guard(f"Drag to {dst_label}", src_label, "dragdrop"):
            src.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            dst.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            src.drag_to(dst)

    def scroll_into_view(self, target: Target) -> None:
        element, label = self._resolve(target)
        with self._guard("Scroll into view", label, "scroll"):
            element.scroll_into_view_if_needed()

    def scroll_by(self, x_offset: float, y_offset: float) -> None:
        with self._guard(f"Scroll by x:{x_offset}, y:{y_offset}", "page", "scrollby", HarnessError):
            self.page.evaluate("([x, y]) => window.scrollBy(x, y)", [x_offset, y_offset])

    def swipe(self, target: Target, direction: SwipeDirection, distance: float = 200) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Swipe {direction} ({distance}px)", label, "swipe"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            box = element.bounding_box()
            if not box:
                raise HarnessError("Element bounding box not available")
            start_x = box["x"] + box["width"] / 2
            start_y = box["y"] + box["height"] / 2
            dx, dy = {
                "left": (-distance, 0),
                "right": (distance, 0),
                "up": (0, -distance),
                "down": (0, distance),
            }[direction]
            self.page.mouse.move(start_x, start_y)
            self.page.mouse.down()
            self.page.mouse.move(start_x + dx, start_y + dy, steps=10)
            self.page.mouse.up()

    def upload_file(self, target: Target, file_path: Union[str, Path, Sequence[Union[str, Path]]]) -> None:
        element, label = self._resolve(target)
        with self._guard("Upload file", label, "upload"):
            def attempt() -> None:
                element.wait_for(state="attached", timeout=VISIBLE_TIMEOUT_MS)
                element.set_input_files(file_path)
            retry_with_backoff(attempt, 2, 500)

    def download_file(self, target: Target) -> Path:
        element, label = self._resolve(target)
        with self._guard("Download file", label, "download", HarnessError):
            def attempt() -> Path:
                element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
                with self.page.expect_download(timeout=DOWNLOAD_TIMEOUT_MS) as info:
                    element.click()
                download = info.value
                DOWNLOAD_DIR.mkdir(parents=True, exist_ok=True)
                path = DOWNLOAD_DIR / f"{_timestamp()}-{download.suggested_filename}"
                download.save_as(path)
                return path
            path = retry_with_backoff(attempt, 2, 1000)
            self.log.info(f"Downloaded file to: {path}")
            return path

    # ==================== Forms ====================

    def fill_form(self, fields: Sequence[Dict[str, Any]]) -> None:
        """Each field: {"selector": str|Locator, "value": str, "mode": "fill"|"type", "delay_ms": int}."""
        for f in fields:
            if f.get("mode", "fill") == "type":
                self.type(f["selector"], f["value"], f.get("delay_ms", 50))
            else:
                self.fill(f["selector"], f["value"])

    def get_form_data(self, form: Target) -> Dict[str, str]:
        element, label = self._resolve(form)
        with self._guard("Get form data", label, "formdata"):
            return element.evaluate(_FORM_DATA_JS)

    def handle_date_picker(self, target: Target, date: str) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Set date: {date}", label, "datepicker"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            element.fill(date)

    def handle_time_picker(self, target: Target, time_value: str) -> None:
        element, label = self._resolve(target)
        with self._guard(f"Set time: {time_value}", label, "timepicker"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            element.fill(time_value)

    # ==================== State ====================

    def wait_for_element(
        self,
        target: Target,
        state: ElementState = "visible",
        timeout: int = WAIT_FOR_ELEMENT_TIMEOUT_MS,
    ) -> None:
        element, label = self._resolve(target)

        def reached() -> bool:
            try:
                element.wait_for(state=state, timeout=2000)
                return True
            except PWTimeout:
                return False

        with self._guard(f"Wait for {state}", label, "wait", TimeoutException):
            if not wait_for_condition(reached, timeout, 500):
                raise TimeoutException(f"Element {label} did not reach {state} state within {timeout}ms")

    def is_visible(self, target: Target) -> bool:
        element, _ = self._resolve(target)
        return element.is_visible()

    def is_enabled(self, target: Target) -> bool:
        element, label = self._resolve(target)
        with self._guard("Is enabled", label, "isenabled"):
            return element.is_enabled()

    def is_checked(self, target: Target) -> bool:
        element, label = self._resolve(target)
        with self._guard("Is checked", label, "ischecked"):
            return element.is_checked()

    def get_text(self, target: Target) -> str:
        element, label = self._resolve(target)
        with self._guard("Get text", label, "gettext"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            return element.inner_text()

    def get_text_content(self, target: Target) -> Optional[str]:
        element, label = self._resolve(target)
        with self._guard("Get text content", label, "textcontent"):
            return element.text_content()

    def get_attribute(self, target: Target, name: str) -> Optional[str]:
        element, label = self._resolve(target)
        with self._guard(f"Get attribute: {name}", label, "getattr"):
            return element.get_attribute(name)

    def get_input_value(self, target: Target) -> str:
        element, label = self._resolve(target)
        with self._guard("Get input value", label, "inputvalue"):
            return element.input_value()

    def get_element_count(self, target: Target) -> int:
        element, _ = self._resolve(target)
        return element.count()

    def get_computed_style(self, target: Target, prop: str) -> str:
        element, label = self._resolve(target)
        with self._guard(f"Get computed style: {prop}", label, "computedstyle"):
            element.wait_for(state="attached", timeout=VISIBLE_TIMEOUT_MS)
            return element.evaluate(
                "(el, prop) => window.getComputedStyle(el).getPropertyValue(prop)", prop
            )

    def get_element_bounding_box(self, target: Target) -> Optional[Dict[str, float]]:
        element, label = self._resolve(target)
        with self._guard("Get bounding box", label, "boundingbox"):
            element.wait_for(state="visible", timeout=VISIBLE_TIMEOUT_MS)
            return element.bounding_box()

    def is_element_in_viewport(self, target: Target) -> bool:
        element, _ = self._resolve(target)
        try:
            element.wait_for(state="attached", timeout=VISIBLE_TIMEOUT_MS)
            return bool(element.evaluate(_IN_VIEWPORT_JS))
        except PlaywrightError:
            return False

    def get_element_tag_name(self, target: Target) -> str:
        element, label = self._resolve(target)
        with self._guard("Get tag name", label, "tagname"):
            element.wait_for(state="attached", timeout=VISIBLE_TIMEOUT_MS)
            return element.evaluate("(el) => el.tagName.toLowerCase()")

    def has_class(self, target: Target, class_name: str) -> bool:
        classes = (self.get_attribute(target, "class") or "").split()
        return class_name in classes

    def get_all_attributes(self, target: Target) -> Dict[str, str]:
        element, label = self._resolve(target)
        with self._guard("Get all attributes", label, "attributes"):
            element.wait_for(state="attached", timeout=VISIBLE_TIMEOUT_MS)
            return element.evaluate(_ALL_ATTRIBUTES_JS)

    # ==================== DOM traversal ====================

    def get_parent_element(self, target: Target) -> Locator:
        return self._resolve(target)[0].locator("xpath=..")

    def get_sibling_elements(self, target: Target) -> Locator:
        return self._resolve(target)[0].locator("xpath=../*")

    def get_child_elements(self, target: Target) -> Locator:
        return self._resolve(target)[0].locator(":scope > *")

    def find_in_shadow_dom(self, shadow_host: Target, selector: str) -> Locator:
        # Playwright CSS selectors pierce open shadow roots.
        return self._resolve(shadow_host)[0].locator(selector)

    def traverse_to_element(self, path_selectors: Sequence[str]) -> Locator:
        if not path_selectors:
            raise ValueError("path_selectors cannot be empty")
        current = self.page.locator(path_selectors[0])
        for selector in path_selectors[1:]:
            current = current.locator(selector)
        return current

    def find_by_xpath(self, xpath: str) -> Locator:
        return self.page.locator(f"xpath={xpath}")

    def find_by_test_id(self, test_id: str) -> Locator:
        return self.page.get_by_test_id(test_id)

    def get_all_elements_matching(self, selector: str) -> List[Dict[str, Any]]:
        loc = self.page.locator(selector)
        return [
            {"index": i, "text": loc.nth(i).text_content(), "visible": loc.nth(i).is_visible()}
            for i in range(loc.count())
        ]

    def switch_to_frame(self, frame_selector: str) -> FrameLocator:
        return self.page.frame_locator(frame_selector)

    def switch_to_window(self, index: int) -> Page:
        pages = self.page.context.pages
        if index >= len(pages):
            raise HarnessError(f"Window index {index} out of bounds ({len(pages)} open)")
        target = pages[index]
        target.bring_to_front()
        self.log.log_action(f"Switch to window {index}", target.url)
        return target

    # ==================== Dialogs ====================

    def handle_alert(self, action: Literal["accept", "dismiss"] = "accept") -> DialogResult:
        """Register a one-shot handler for the next dialog; the result fills in when it fires."""
        result = DialogResult()

        def handler(dialog: Dialog) -> None:
            result.message = dialog.message
            result.handled = True
            if action == "dismiss":
                dialog.dismiss()
            else:
                dialog.accept()

        self.log.log_action(f"Handle alert: {action}")
        self.page.once("dialog", handler)
        return result

    def handle_prompt(self, action: Literal["accept", "dismiss"] = "accept", text: Optional[str] = None) -> DialogResult:
        result = DialogResult()

        def handler(dialog: Dialog) -> None:
            result.message = dialog.message
            result.handled = True
            if action == "dismiss":
                dialog.dismiss()
            else:
                dialog.accept(text)

        self.log.log_action(f"Handle prompt: {action}")
        self.page.once("dialog", handler)
        return result

    # ==================== Cookies / storage ====================

    def set_cookie(self, name: str, value: str, **options: Any) -> None:
        cookie: Dict[str, Any] = {"name": name, "value": value, **options}
        if "domain" not in cookie and "url" not in cookie:
            cookie["url"] = self.page.url
        self.log.log_action(f"Set cookie: {name}")
        self.page.context.add_cookies([cookie])

    def get_cookie(self, name: str) -> Optional[Dict[str, Any]]:
        return next((c for c in self.page.context.cookies() if c["name"] == name), None)

    def delete_cookie(self, name: str) -> None:
        self.log.log_action(f"Delete cookie: {name}")
        self.page.context.clear_cookies(name=name)

    def get_all_cookies(self) -> List[Dict[str, Any]]:
        return list(self.page.context.cookies())

    def get_local_storage(self, key: str) -> Optional[str]:
        return self.page.evaluate("(k) => window.localStorage.getItem(k)", key)

    def set_local_storage(self, key: str, value: str) -> None:
        self.page.evaluate("([k, v]) => window.localStorage.setItem(k, v)", [key, value])

    def get_session_storage(self, key: str) -> Optional[str]:
        return self.page.evaluate("(k) => window.sessionStorage.getItem(k)", key)

    def set_session_storage(self, key: str, value: str) -> None:
        self.page.evaluate("([k, v]) => window.sessionStorage.setItem(k, v)", [key, value])

    def clear_storage(self) -> None:
        self.log.log_action("Clear storage")
        self.page.evaluate("() => { window.localStorage.clear(); window.sessionStorage.clear(); }")

    # ==================== Screenshots / scripts ====================

    def take_screenshot(self, name: str) -> Optional[Path]:
        """Full-page screenshot. Never raises; returns None when capture fails."""
        path = self.screenshots.get_screenshot_path(name)
        try:
            self.page.screenshot(path=str(path), full_page=True)
        except PlaywrightError as e:
            self.log.warn(f"Failed to take screenshot '{name}': {e}")
            return None
        self.log.info(f"Screenshot saved: {path}")
        return path

    def take_element_screenshot(self, target: Target, name: str) -> Optional[Path]:
        element, label = self._resolve(target)
        path = self.screenshots.get_screenshot_path(name)
        try:
            element.screenshot(path=str(path))
        except PlaywrightError as e:
            self.log.warn(f"Failed to take element screenshot for {label}: {e}")
            return None
        return path

    def execute_script(self, script: str, arg: Any = None) -> Any:
        with self._guard("Execute JavaScript", "page", "script", HarnessError):
            return self.page.evaluate(script, arg)
