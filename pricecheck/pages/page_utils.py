"""
Helpers shared by several page objects
"""
import logging

from pricecheck.interaction.resilient import ResilientInteractor, VISIBLE
from pricecheck.utils.errors import NoInteractableElementFound

logger = logging.getLogger(__name__)

COOKIE_BANNER = "#cookieBanner"
COOKIE_BUTTONS = [
    "#cookieBanner button[data-testid*='accept']",
    "#cookieBanner button[data-testid*='close']",
    "#cookieBanner .btn-accept",
    "#cookieBanner .close",
    "#cookieBanner button[type='button']",
]
HIDE_COOKIE_BANNER_JS = (
    "() => { const banner = document.getElementById('cookieBanner');"
    " if (banner) { banner.style.display = 'none'; } }"
)


def dismiss_cookie_banner(interactor: ResilientInteractor, timeout_s: float = 3) -> bool:
    """
    Close the cookie banner if it is showing.

    Tries the banner's own buttons first and hides it from script when none
    of them can be clicked. Returns True if a banner was found and handled.
    """
    if not interactor.wait_for_elements(COOKIE_BANNER, timeout_s, condition=VISIBLE):
        logger.debug("No cookie banner found or already dismissed")
        return False

    logger.info("Cookie banner detected, attempting to dismiss")
    try:
        interactor.click_first(COOKIE_BUTTONS, operation="dismiss cookie banner", timeout_s=1)
        logger.info("Cookie banner dismissed successfully")
    except NoInteractableElementFound:
        interactor.driver.execute_script(HIDE_COOKIE_BANNER_JS)
        logger.info("Cookie banner hidden via JavaScript")
    return True
