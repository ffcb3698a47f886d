"""
Report sink for journeys: allure steps and attachments, plus JSON snapshots on disk.

Attachment failures are logged and swallowed so reporting never masks the
failure being reported.
"""
import os
import re
import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

import allure

from pricecheck.models.scenario import TestScenario

logger = logging.getLogger(__name__)

SNAPSHOT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"


@contextmanager
def step(description: str) -> Iterator[None]:
    """A named report step; also logged so the console tells the same story."""
    logger.info(f"STEP: {description}")
    with allure.step(description):
        yield


def attach_screenshot(source: Any, name: str = "screenshot") -> bool:
    """
    Attach a full-page screenshot from a driver or session.

    Returns:
        True if the screenshot was attached
    """
    try:
        data = source.screenshot() if source is not None else None
        if not data:
            logger.warning(f"No screenshot available for {name}")
            return False
        allure.attach(data, name=name, attachment_type=allure.attachment_type.PNG)
        return True
    except Exception as e:
        logger.error(f"Failed to attach screenshot {name}: {e}")
        return False


def attach_json(name: str, scenario: TestScenario) -> None:
    try:
        allure.attach(scenario.to_json(), name=name, attachment_type=allure.attachment_type.JSON)
    except Exception as e:
        logger.error(f"Failed to attach {name}: {e}")


def add_parameters(parameters: Dict[str, Any]) -> None:
    for key, value in parameters.items():
        allure.dynamic.parameter(key, "" if value is None else str(value))


def save_screenshot(data: bytes, test_id: str, directory: Optional[str] = None,
                    when: Optional[datetime] = None) -> Optional[str]:
    """Write PNG bytes under the screenshot directory; returns the path or None."""
    if directory is None:
        from pricecheck.config import settings
        directory = settings.get_screenshot_dir()
    name = re.sub(r"[^a-zA-Z0-9]", "_", test_id)
    path = os.path.join(directory, f"{name}_{(when or datetime.now()):%Y%m%d_%H%M%S}.png")
    try:
        os.makedirs(directory, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.error(f"Failed to save screenshot {path}: {e}")
        return None
    logger.info(f"Screenshot saved: {path}")
    return path


def snapshot_filename(test_type: str, browser: str, search_term: str, started_at: datetime) -> str:
    """``<type>_<browser>_<term>_<timestamp>.json`` with the term reduced to [a-z0-9_]."""
    clean_term = re.sub(r"[^a-zA-Z0-9]", "_", search_term).lower()
    timestamp = started_at.strftime(SNAPSHOT_TIMESTAMP_FORMAT)[:-3]
    return f"{test_type}_{browser}_{clean_term}_{timestamp}.json"


def save_snapshot_json(scenario: TestScenario,
                       test_type: str,
                       browser: str,
                       started_at: Optional[datetime] = None,
                       directory: Optional[str] = None) -> Optional[str]:
    """Write the scenario snapshot under the price-capture directory; returns the path or None."""
    if directory is None:
        from pricecheck.config import settings
        directory = settings.get_price_capture_dir()
    filename = snapshot_filename(test_type, browser, scenario.search_term, started_at or datetime.now())
    path = os.path.join(directory, filename)
    try:
        os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(scenario.to_json())
    except OSError as e:
        logger.error(f"Failed to save price snapshot {path}: {e}")
        return None
    logger.info(f"Price snapshot saved: {path}")
    return path


class Reporter:
    """The report sink handed to a journey; tests swap in a Mock."""

    def step(self, description: str):
        return step(description)

    def attach_screenshot(self, source: Any, name: str = "screenshot") -> bool:
        return attach_screenshot(source, name)

    def attach_json(self, name: str, scenario: TestScenario) -> None:
        attach_json(name, scenario)

    def add_parameters(self, parameters: Dict[str, Any]) -> None:
        add_parameters(parameters)

    def save_snapshot_json(self, scenario: TestScenario, test_type: str, browser: str,
                           started_at: Optional[datetime] = None) -> Optional[str]:
        return save_snapshot_json(scenario, test_type, browser, started_at)
