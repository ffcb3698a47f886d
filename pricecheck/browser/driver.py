"""
Narrow driver boundary over a Playwright page.

Page objects and the resilient interactor only talk to this class, so the
whole interaction layer can be exercised against an in-memory fake.
Playwright errors raised while touching an element are translated into
``StaleReference`` / ``ElementNotInteractable``.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError

from pricecheck.utils.errors import ElementNotInteractable, StaleReference

logger = logging.getLogger(__name__)

_STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "execution context was destroyed",
    "frame was detached",
    "node is detached",
)


def translate_error(error: BaseException, action: str) -> ElementNotInteractable:
    """Map a Playwright error to the suite's recoverable interaction errors."""
    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in _STALE_MARKERS):
        return StaleReference(f"{action}: {message}")
    return ElementNotInteractable(f"{action}: {message}")


@contextmanager
def _element_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightError as e:
        raise translate_error(e, action) from e


class PlaywrightDriver:
    """Capability set used by the interactor: find, inspect, click, type, script, screenshot."""

    def __init__(self, page: Any, action_timeout_ms: int = 10000, navigation_timeout_ms: int = 60000) -> None:
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms

    # Navigation
    def navigate(self, url: str) -> None:
        logger.info(f"Navigating to {url}")
        self.page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)

    @property
    def current_url(self) -> str:
        return self.page.url

    def title(self) -> str:
        return self.page.title()

    def wait_for_page_load(self, timeout_s: Optional[float] = None) -> bool:
        """Wait for the load event; a timeout is logged and reported as False."""
        timeout_ms = int(timeout_s * 1000) if timeout_s is not None else self.navigation_timeout_ms
        try:
            self.page.wait_for_load_state("load", timeout=timeout_ms)
            return True
        except PlaywrightError as e:
            logger.warning(f"Page load wait timed out after {timeout_ms}ms: {e}")
            return False

    def pause(self, seconds: float) -> None:
        self.page.wait_for_timeout(int(seconds * 1000))

    # Lookup
    def find_elements(self, selector: str) -> List[Any]:
        """CSS by default; ``xpath=``/``text=`` prefixes are passed through to Playwright."""
        with _element_errors(f"find {selector}"):
            return self.page.query_selector_all(selector)

    def find_within(self, element: Any, selector: str) -> Optional[Any]:
        with _element_errors(f"find {selector} within element"):
            return element.query_selector(selector)

    def parent_control(self, element: Any) -> Optional[Any]:
        """Closest enclosing button or link of a (possibly non-interactive) node."""
        return self.find_within(element, "xpath=ancestor::*[self::button or self::a][1]")

    # State
    def is_displayed(self, element: Any) -> bool:
        with _element_errors("is_displayed"):
            return element.is_visible()

    def is_enabled(self, element: Any) -> bool:
        with _element_errors("is_enabled"):
            return element.is_enabled()

    def text(self, element: Any) -> str:
        with _element_errors("text"):
            return (element.inner_text() or "").strip()

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        with _element_errors(f"get_attribute {name}"):
            return element.get_attribute(name)

    # Actions
    def scroll_into_view(self, element: Any) -> None:
        with _element_errors("scroll_into_view"):
            element.scroll_into_view_if_needed(timeout=self.action_timeout_ms)

    def click(self, element: Any) -> None:
        with _element_errors("click"):
            element.click(timeout=self.action_timeout_ms)

    def force_click(self, element: Any) -> None:
        """Dispatch the click from page script, bypassing actionability and overlay checks."""
        with _element_errors("script click"):
            self.page.evaluate("el => el.click()", element)

    def hover_click(self, element: Any) -> None:
        """Move the pointer to the element centre, pause, then click there."""
        with _element_errors("pointer click"):
            box = element.bounding_box()
            if not box:
                raise ElementNotInteractable("pointer click: element has no bounding box")
            x = box["x"] + box["width"] / 2
            y = box["y"] + box["height"] / 2
            self.page.mouse.move(x, y, steps=5)
            self.page.wait_for_timeout(300)
            self.page.mouse.click(x, y)

    def send_keys(self, element: Any, text: str) -> None:
        with _element_errors("send_keys"):
            element.type(text, timeout=self.action_timeout_ms)

    def clear_and_type(self, element: Any, text: str) -> None:
        with _element_errors("clear_and_type"):
            element.fill(text, timeout=self.action_timeout_ms)

    def press(self, element: Any, key: str) -> None:
        with _element_errors(f"press {key}"):
            element.press(key, timeout=self.action_timeout_ms)

    def execute_script(self, script: str, arg: Any = None) -> Any:
        return self.page.evaluate(script, arg)

    def screenshot(self) -> bytes:
        return self.page.screenshot(full_page=True)
