"""
Browser session lifecycle: one Playwright browser per test case.

Sessions are created lazily, handed explicitly to the page objects, and
always closed at teardown, whatever state the journey reached.
"""
import importlib
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from pricecheck.browser.driver import PlaywrightDriver
from pricecheck.config import settings

logger = logging.getLogger(__name__)

# Selenium-style names used in config files map onto Playwright engines
_ENGINE_ALIASES: Dict[str, str] = {
    "chrome": "chromium",
    "chromium": "chromium",
    "edge": "chromium",
    "msedge": "chromium",
    "firefox": "firefox",
    "webkit": "webkit",
    "safari": "webkit",
}
_CHANNELS: Dict[str, str] = {
    "chrome": "chrome",
    "edge": "msedge",
    "msedge": "msedge",
}


def _sync_playwright() -> Any:
    return importlib.import_module("playwright.sync_api").sync_playwright


class BrowserSession:
    """Owns the Playwright runtime, browser, context and page for one test case."""

    def __init__(
        self,
        browser_name: str = "chromium",
        base_url: Optional[str] = None,
        headless: bool = True,
        slow_mo_ms: int = 0,
        action_timeout_ms: int = 10000,
        navigation_timeout_ms: int = 60000,
        use_channel: bool = False,
    ) -> None:
        self.browser_name = browser_name.lower()
        if self.browser_name not in _ENGINE_ALIASES:
            raise ValueError(f"Unsupported browser: {browser_name}")
        self.base_url = base_url
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.action_timeout_ms = action_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.use_channel = use_channel

        self._playwright_manager: Any = None
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None
        self._driver: Optional[PlaywrightDriver] = None

    @classmethod
    def from_settings(cls, browser_name: Optional[str] = None) -> "BrowserSession":
        return cls(
            browser_name=browser_name or settings.get_browser_type(),
            base_url=settings.get_base_url(),
            headless=settings.is_headless(),
            slow_mo_ms=settings.get_slow_mo_ms(),
            action_timeout_ms=settings.get_implicit_timeout_s() * 1000,
            navigation_timeout_ms=settings.get_page_load_timeout_s() * 1000,
        )

    @property
    def engine(self) -> str:
        return _ENGINE_ALIASES[self.browser_name]

    @property
    def is_started(self) -> bool:
        return self._driver is not None

    @property
    def driver(self) -> PlaywrightDriver:
        """The session's driver, launching the browser on first access."""
        if self._driver is None:
            self.start()
        return self._driver

    def _launch_kwargs(self) -> Dict[str, Any]:
        browser_args = []
        if self.engine == "chromium":
            browser_args = [
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
                "--no-sandbox",
            ]
            if self.headless:
                browser_args.append("--headless=new")
        launch_kwargs: Dict[str, Any] = {
            "headless": self.headless,
            "args": browser_args,
        }
        if self.slow_mo_ms:
            launch_kwargs["slow_mo"] = self.slow_mo_ms
        channel = _CHANNELS.get(self.browser_name)
        if channel and (self.use_channel or self.browser_name in ("edge", "msedge")):
            launch_kwargs["channel"] = channel
        return launch_kwargs

    def start(self) -> PlaywrightDriver:
        if self._driver is not None:
            logger.info("Browser session already started for this test")
            return self._driver

        logger.info(f"Starting {self.browser_name} session (headless={self.headless})")
        self._playwright_manager = _sync_playwright()()
        try:
            self._playwright = self._playwright_manager.start()
            browser_type = getattr(self._playwright, self.engine)
            self._browser = browser_type.launch(**self._launch_kwargs())
            self._context = self._browser.new_context(
                viewport={"width": 1920, "height": 1080},
                locale="en-US",
            )
            self._context.set_default_timeout(self.action_timeout_ms)
            self._context.set_default_navigation_timeout(self.navigation_timeout_ms)
            self._page = self._context.new_page()
            self._driver = PlaywrightDriver(
                self._page,
                action_timeout_ms=self.action_timeout_ms,
                navigation_timeout_ms=self.navigation_timeout_ms,
            )
            if self.base_url:
                self._driver.navigate(self.base_url)
                logger.info(f"Navigated to base URL: {self.base_url}")
        except Exception:
            self.close()
            raise
        return self._driver

    def screenshot(self) -> Optional[bytes]:
        """Best-effort full-page screenshot; None if the session never started or capture failed."""
        if self._driver is None:
            return None
        try:
            return self._driver.screenshot()
        except Exception as e:
            logger.error(f"Failed to capture screenshot on {self.browser_name}: {e}")
            return None

    def close(self) -> None:
        """Release every resource. Safe to call more than once; never raises."""
        try:
            if self._context:
                self._context.close()
        except Exception as e:
            logger.warning(f"Failed to close browser context: {e}")
        try:
            if self._browser:
                self._browser.close()
        except Exception as e:
            logger.warning(f"Failed to close browser: {e}")
        try:
            if self._playwright:
                self._playwright.stop()
        except Exception as e:
            logger.warning(f"Failed to stop Playwright: {e}")
        if self._driver is not None:
            logger.info(f"Browser session closed for {self.browser_name}")
        self._context = None
        self._browser = None
        self._page = None
        self._driver = None
        self._playwright = None
        self._playwright_manager = None

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@contextmanager
def browser_session(browser_name: Optional[str] = None, **overrides: Any) -> Iterator[BrowserSession]:
    """
    Acquire a session configured from settings, yield it, release it on every exit path.

    Keyword overrides replace the matching settings (e.g. ``headless=False``).
    """
    session = BrowserSession.from_settings(browser_name)
    for key, value in overrides.items():
        if not hasattr(session, key):
            raise TypeError(f"Unknown session option: {key}")
        setattr(session, key, value)
    try:
        yield session
    finally:
        session.close()
