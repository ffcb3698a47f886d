"""
Pydantic model for one test scenario record of the fixture document
"""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

CAPTURE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TestScenario(BaseModel):
    """One parameterized journey: what to search, which result to open, the prices seen on the way"""
    # Not a pytest test class despite the name
    __test__ = False

    search_term: str = Field(..., alias="searchTerm", description="Term typed into the header search box")
    product_index: int = Field(..., alias="productIndex", description="1-based position in the search results")
    current_price: Optional[str] = Field(None, alias="currentPrice")
    expected_price: Optional[str] = Field(None, alias="expectedPrice")
    new_price: Optional[str] = Field(None, alias="newPrice")
    expected_item_name: Optional[str] = Field(None, alias="expectedItemName")
    customization_options: Optional[Dict[str, str]] = Field(None, alias="customizationOptions")
    category: Optional[str] = None
    is_customizable: bool = Field(default=False, alias="isCustomizable")

    # Capture metadata written by snapshots
    product_name: Optional[str] = Field(None, alias="productName")
    product_id: Optional[str] = Field(None, alias="productId")
    capture_timestamp: Optional[str] = Field(None, alias="captureTimestamp")
    test_environment: Optional[str] = Field(None, alias="testEnvironment")
    browser: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("customization_options", mode="before")
    @classmethod
    def options_as_strings(cls, value: Any) -> Any:
        # Option labels are matched as text; "size": 9 means "9"
        if isinstance(value, dict):
            return {
                str(k): str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v
                for k, v in value.items()
            }
        return value

    def is_valid(self) -> bool:
        """Non-empty search term, productIndex >= 1 and a non-empty current price."""
        return (
            bool(self.search_term and self.search_term.strip())
            and self.product_index >= 1
            and bool(self.current_price and self.current_price.strip())
        )

    @property
    def zero_based_index(self) -> int:
        return self.product_index - 1

    def has_customization_options(self) -> bool:
        return bool(self.customization_options)

    @staticmethod
    def _with_currency(price: Optional[str]) -> Optional[str]:
        if price is not None and not price.startswith("$"):
            return "$" + price
        return price

    def formatted_price(self) -> Optional[str]:
        return self._with_currency(self.current_price)

    def formatted_new_price(self) -> Optional[str]:
        return self._with_currency(self.new_price)

    def mark_captured(self, browser: str, environment: str, when: Optional[datetime] = None) -> None:
        self.capture_timestamp = (when or datetime.now()).strftime(CAPTURE_TIMESTAMP_FORMAT)
        self.browser = browser
        self.test_environment = environment

    def is_recent_capture(self, now: Optional[datetime] = None) -> bool:
        """True if the capture timestamp lies within the last hour."""
        if not self.capture_timestamp:
            return False
        try:
            captured = datetime.strptime(self.capture_timestamp, CAPTURE_TIMESTAMP_FORMAT)
        except ValueError:
            return False
        return captured > (now or datetime.now()) - timedelta(hours=1)

    def capture_info(self) -> str:
        return (
            f"Captured at: {self.capture_timestamp or 'Unknown'}, "
            f"Browser: {self.browser or 'Unknown'}, "
            f"Environment: {self.test_environment or 'Unknown'}"
        )

    def to_record(self) -> Dict[str, Any]:
        """The JSON-ready record, camelCase keys, unknown keys kept."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_record(), indent=2, ensure_ascii=False)

    def __str__(self) -> str:
        return (
            f"TestScenario(searchTerm={self.search_term!r}, productIndex={self.product_index}, "
            f"currentPrice={self.current_price!r}, newPrice={self.new_price!r})"
        )
