"""
Tests for the TestScenario record model.
"""
from datetime import datetime

import pytest
from pydantic import ValidationError

from pricecheck.models.scenario import TestScenario


def test_reads_camel_case_record():
    s = TestScenario.model_validate({
        "searchTerm": "Garland",
        "productIndex": 2,
        "currentPrice": "$89.99",
        "customizationOptions": {"length": "9ft"},
        "notes": "kept as-is",
    })
    assert s.search_term == "Garland"
    assert s.zero_based_index == 1
    assert s.has_customization_options()
    assert s.to_record()["notes"] == "kept as-is"


def test_missing_required_fields():
    with pytest.raises(ValidationError):
        TestScenario.model_validate({"currentPrice": "$1"})


@pytest.mark.parametrize("data,expected", [
    ({"searchTerm": "Tree", "productIndex": 1, "currentPrice": "$1"}, True),
    ({"searchTerm": "  ", "productIndex": 1, "currentPrice": "$1"}, False),
    ({"searchTerm": "Tree", "productIndex": 0, "currentPrice": "$1"}, False),
    ({"searchTerm": "Tree", "productIndex": 1}, False),
])
def test_is_valid(data, expected):
    assert TestScenario(**data).is_valid() is expected


def test_formatted_prices():
    s = TestScenario(searchTerm="Tree", productIndex=1, currentPrice="299.99", newPrice="$310.00")
    assert s.formatted_price() == "$299.99"
    assert s.formatted_new_price() == "$310.00"


def test_capture_metadata():
    s = TestScenario(searchTerm="Tree", productIndex=1)
    assert not s.is_recent_capture()
    assert "Unknown" in s.capture_info()

    captured = datetime(2024, 12, 1, 10, 0, 0)
    s.mark_captured("firefox", "staging", captured)
    assert s.capture_timestamp == "2024-12-01 10:00:00"
    assert s.is_recent_capture(now=datetime(2024, 12, 1, 10, 30))
    assert not s.is_recent_capture(now=datetime(2024, 12, 1, 11, 30))
    assert s.capture_info() == "Captured at: 2024-12-01 10:00:00, Browser: firefox, Environment: staging"


def test_not_collected_by_pytest():
    assert TestScenario.__test__ is False


def test_numeric_option_values_become_text():
    s = TestScenario.model_validate({"searchTerm": "Tree", "productIndex": 1,
                                     "customizationOptions": {"size": 9, "lightType": "Clear"}})
    assert s.customization_options == {"size": "9", "lightType": "Clear"}
