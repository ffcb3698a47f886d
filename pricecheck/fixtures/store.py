"""
JSON-backed store of test scenarios.

The document is a JSON object with a top-level ``tests`` array. Reads go
through the ``TestScenario`` model; field updates operate on the raw document
so every sibling field, key order and record order survives a rewrite.
There is no locking: concurrent writers to one document get last-write-wins.
"""
import os
import json
import logging
import tempfile
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from pricecheck.models.scenario import TestScenario
from pricecheck.utils.errors import FixtureIndexError, FixtureMalformed

logger = logging.getLogger(__name__)

TESTS_KEY = "tests"


def fallback_scenarios() -> List[TestScenario]:
    """Built-in scenarios used when the fixture document cannot be loaded."""
    return [
        TestScenario(
            searchTerm="Christmas Tree",
            productIndex=1,
            currentPrice="$299.99",
            newPrice="$299.99",
            expectedItemName="Classic Christmas Tree",
            category="Trees",
            customizationOptions={"size": "7.5ft", "lightType": "Clear"},
            isCustomizable=True,
        ),
        TestScenario(
            searchTerm="Garland",
            productIndex=2,
            currentPrice="$89.99",
            newPrice="$89.99",
            expectedItemName="Classic Garland",
            category="Garlands & Wreaths",
        ),
        TestScenario(
            searchTerm="Wreath",
            productIndex=1,
            currentPrice="$129.99",
            newPrice="$129.99",
            expectedItemName="Holiday Wreath",
            category="Garlands & Wreaths",
        ),
    ]


class FixtureStore:
    """Positional read-all / update-one-field access to a scenario document."""

    def __init__(self, path: Optional[str] = None):
        if path is None:
            from pricecheck.config import settings
            path = settings.get_test_data_file()
        self.path = path
        # Set by load_or_fallback when the built-in scenarios replaced the document
        self.using_fallback = False

    def __repr__(self) -> str:
        return f"FixtureStore({self.path!r})"

    # Raw document access
    def _read_document(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            raise FixtureMalformed(f"Test data file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise FixtureMalformed(f"Could not read test data file {self.path}: {e}") from e
        if not isinstance(document, dict) or not isinstance(document.get(TESTS_KEY), list):
            raise FixtureMalformed(f"Invalid JSON structure in {self.path}: '{TESTS_KEY}' array not found")
        return document

    def _write_document(self, document: Dict[str, Any]) -> None:
        """Write to a temp file in the same directory, then swap it in."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(prefix=".testdata-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    # Reads
    def load_all(self) -> List[TestScenario]:
        """
        Load every scenario in document order.

        Raises:
            FixtureMalformed: file missing, not JSON, no ``tests`` array, or a
                record that does not fit the scenario model
        """
        records = self._read_document()[TESTS_KEY]
        scenarios = []
        for position, record in enumerate(records):
            try:
                scenarios.append(TestScenario.model_validate(record))
            except ValidationError as e:
                raise FixtureMalformed(f"Record {position} in {self.path} is invalid: {e}") from e
        logger.info(f"Loaded {len(scenarios)} scenarios from {self.path}")
        return scenarios

    def load_or_fallback(self) -> List[TestScenario]:
        """Like load_all, but degrade to the built-in scenarios (and set ``using_fallback``) when the document is unusable."""
        try:
            scenarios = self.load_all()
        except FixtureMalformed as e:
            logger.warning(f"{e}; using {len(fallback_scenarios())} fallback scenarios")
            self.using_fallback = True
            return fallback_scenarios()
        self.using_fallback = False
        return scenarios

    def get_by_index(self, index: int) -> Optional[TestScenario]:
        scenarios = self.load_all()
        if 0 <= index < len(scenarios):
            return scenarios[index]
        return None

    def get_by_search_term(self, search_term: str) -> Optional[TestScenario]:
        return next((s for s in self.load_all() if s.search_term == search_term), None)

    def validate_file(self) -> bool:
        """True if the document exists and carries a ``tests`` array."""
        try:
            self._read_document()
        except FixtureMalformed as e:
            logger.warning(f"Test data file failed validation: {e}")
            return False
        return True

    # Writes
    def update_field(self, index: int, field_name: str, new_value: Any) -> None:
        """
        Rewrite one field of the record at ``index`` and persist the whole document.

        Args:
            index: 0-based position in the ``tests`` array
            field_name: JSON field name as stored (e.g. ``currentPrice``)
            new_value: Replacement value

        Raises:
            FixtureMalformed: the document is missing or has no ``tests`` array
            FixtureIndexError: index out of range; nothing is written
        """
        document = self._read_document()
        records = document[TESTS_KEY]
        if not 0 <= index < len(records) or not isinstance(records[index], dict):
            raise FixtureIndexError(f"Invalid index: {index} not found in '{TESTS_KEY}' array of {self.path}")
        records[index][field_name] = new_value
        self._write_document(document)
        logger.info(f"Updated {field_name} of test {index} to {new_value!r}")

    def update_current_price(self, index: int, price: str) -> None:
        self.update_field(index, "currentPrice", price)

    def update_new_price(self, index: int, price: str) -> None:
        self.update_field(index, "newPrice", price)

    def update_expected_item_name(self, index: int, item_name: str) -> None:
        self.update_field(index, "expectedItemName", item_name)

    def update_customization_options(self, index: int, options: Dict[str, str]) -> None:
        self.update_field(index, "customizationOptions", dict(options))

    def add_scenario(self, scenario: TestScenario) -> int:
        """Append a scenario and return its index."""
        document = self._read_document()
        document[TESTS_KEY].append(scenario.to_record())
        self._write_document(document)
        index = len(document[TESTS_KEY]) - 1
        logger.info(f"Added scenario {scenario.search_term!r} at index {index}")
        return index

    def create_sample_file(self) -> bool:
        """Write the fallback scenarios as a new document. Returns False if one already exists."""
        if os.path.exists(self.path):
            logger.info(f"Test data file already exists: {self.path}")
            return False
        self._write_document({TESTS_KEY: [s.to_record() for s in fallback_scenarios()]})
        logger.info(f"Created sample test data file: {self.path}")
        return True
