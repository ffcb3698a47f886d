"""
Live-browser fixtures for the price journeys.

The suite talks to the real storefront, so it only runs when RUN_E2E=1 and
BH_USERNAME / BH_PASSWORD are exported. One BrowserSession per test; it is
closed at teardown whatever state the journey reached.
"""
import os
import logging

import allure
import pytest

from pricecheck.browser.session import browser_session
from pricecheck.config import settings
from pricecheck.reporting import report

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def pytest_collection_modifyitems(config, items):
    reason = None
    if os.environ.get("RUN_E2E") != "1":
        reason = "set RUN_E2E=1 to run the live browser suite"
    elif not settings.has_credentials():
        reason = "BH_USERNAME and BH_PASSWORD must be set"
    if reason is None:
        logger.info(f"Live suite configuration: {settings.describe()}")
        return
    skip = pytest.mark.skip(reason=reason)
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(params=settings.get_browsers())
def browser_name(request):
    return request.param


@pytest.fixture
def session(browser_name):
    with browser_session(browser_name) as s:
        yield s


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    if rep.when != "call" or not rep.failed or not settings.is_screenshot_on_failure():
        return
    session = item.funcargs.get("session")
    if session is None or not session.is_started:
        return
    data = session.screenshot()
    if not data:
        return
    allure.attach(data, name=f"Failure - {item.name}", attachment_type=allure.attachment_type.PNG)
    report.save_screenshot(data, item.nodeid)
