"""
Tests for allure attachments and snapshot files.
"""
import os
import json
from datetime import datetime
from unittest.mock import Mock, patch

from pricecheck.models.scenario import TestScenario
from pricecheck.reporting import report


STARTED = datetime(2024, 12, 1, 14, 5, 9, 123456)


def scenario():
    return TestScenario(searchTerm="Christmas Tree 7.5'", productIndex=1, currentPrice="$299.99")


def test_snapshot_filename():
    name = report.snapshot_filename("complete-journey", "firefox", "Christmas Tree 7.5'", STARTED)
    assert name == "complete-journey_firefox_christmas_tree_7_5__2024-12-01_14-05-09-123.json"


def test_save_snapshot_json(tmp_path):
    path = report.save_snapshot_json(scenario(), "customization", "chromium", STARTED, str(tmp_path / "capture"))

    assert os.path.basename(path).startswith("customization_chromium_christmas_tree_7_5_")
    with open(path, encoding="utf-8") as f:
        saved = json.load(f)
    assert saved == {"searchTerm": "Christmas Tree 7.5'", "productIndex": 1,
                     "currentPrice": "$299.99", "isCustomizable": False}


def test_save_snapshot_uses_configured_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICE_CAPTURE_DIR", str(tmp_path))
    path = report.save_snapshot_json(scenario(), "cart-icon", "webkit", STARTED)
    assert os.path.dirname(path) == str(tmp_path)


def test_save_snapshot_failure_returns_none(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    assert report.save_snapshot_json(scenario(), "x", "chromium", STARTED, str(blocker)) is None


@patch("pricecheck.reporting.report.allure")
def test_attach_screenshot(mock_allure):
    source = Mock()
    source.screenshot.return_value = b"png"
    assert report.attach_screenshot(source, "after cart") is True
    mock_allure.attach.assert_called_once()
    assert mock_allure.attach.call_args[0][0] == b"png"


@patch("pricecheck.reporting.report.allure")
def test_attach_screenshot_is_best_effort(mock_allure):
    print("[test] a broken screenshot never raises")
    source = Mock()
    source.screenshot.side_effect = RuntimeError("browser closed")
    assert report.attach_screenshot(source) is False

    source.screenshot.side_effect = None
    source.screenshot.return_value = None
    assert report.attach_screenshot(source) is False
    mock_allure.attach.assert_not_called()


@patch("pricecheck.reporting.report.allure")
def test_add_parameters(mock_allure):
    report.add_parameters({"Search Term": "Wreath", "Customization Options": None, "Product Index": 2})
    calls = [c[0] for c in mock_allure.dynamic.parameter.call_args_list]
    assert calls == [("Search Term", "Wreath"), ("Customization Options", ""), ("Product Index", "2")]


@patch("pricecheck.reporting.report.allure")
def test_step_wraps_allure_step(mock_allure):
    with report.step("Search for product: Wreath"):
        pass
    mock_allure.step.assert_called_once_with("Search for product: Wreath")


def test_save_screenshot(tmp_path):
    path = report.save_screenshot(b"png", "pricecheck/e2e/test_price_journeys.py::test_item_removal[Tree-1]",
                                  str(tmp_path), when=STARTED)
    assert os.path.basename(path) == "pricecheck_e2e_test_price_journeys_py__test_item_removal_Tree_1__20241201_140509.png"
    with open(path, "rb") as f:
        assert f.read() == b"png"


def test_save_screenshot_failure_returns_none(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    assert report.save_screenshot(b"png", "t", str(blocker)) is None
