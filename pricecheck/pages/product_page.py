"""
Product details page object: customization options, price and add-to-cart
"""
import re
import logging
from typing import Dict, Mapping, Optional

from pricecheck.extractors.price_parser import is_valid_price, require_price
from pricecheck.interaction.resilient import ActionOutcome, ResilientInteractor
from pricecheck.pages.page_utils import dismiss_cookie_banner

logger = logging.getLogger(__name__)

SIZE_OPTIONS = "div[class*='small-product-filter-box'][class*='productDetailFilter_product-filter-item']"
LIGHT_OPTIONS = "div[class*='large-product-filter-box'][class*='productDetailFilter_product-filter-item']"
PRODUCT_PRICE = "div.productPrice_old-new-price__a0Rwo span.product-price"
ADD_TO_CART_BUTTONS = [
    "div.row.align-items-center.h-100 button",
    "xpath=//button[contains(text(), 'Add to Cart') or contains(text(), 'ADD TO CART')"
    " or contains(@aria-label, 'Add to Cart')]",
]

SIZE_OPTION = "size"
LIGHT_OPTION = "lightType"

_NON_ALPHANUMERIC = re.compile(r"[^0-9a-zA-Z\s]")


def size_matches(desired: str):
    """Case-insensitive substring match, so "7.5" picks "7.5 ft"."""
    wanted = desired.lower()
    return lambda label: wanted in label.lower()


def light_matches(desired: str):
    """Case-insensitive equality after dropping punctuation ("Clear*" matches "clear")."""
    wanted = desired.strip().lower()
    return lambda label: _NON_ALPHANUMERIC.sub("", label).strip().lower() == wanted


class ProductPage:
    def __init__(self, interactor: ResilientInteractor):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor

    def _dismiss_banner(self) -> None:
        dismiss_cookie_banner(self.interactor)

    def select_size(self, desired_size: str) -> Optional[str]:
        return self.interactor.select_from_list(SIZE_OPTIONS, size_matches(desired_size),
                                                before_click=self._dismiss_banner, operation="select size")

    def select_light(self, desired_light: str) -> Optional[str]:
        return self.interactor.select_from_list(LIGHT_OPTIONS, light_matches(desired_light),
                                                before_click=self._dismiss_banner, operation="select light")

    def select_options(self, options: Optional[Mapping[str, str]]) -> Dict[str, Optional[str]]:
        """
        Apply the size and light options of a scenario.

        Returns:
            Option name -> label of the option clicked (None where nothing matched)
        """
        selected: Dict[str, Optional[str]] = {}
        if not options:
            return selected
        self._dismiss_banner()

        desired_size = options.get(SIZE_OPTION)
        desired_light = options.get(LIGHT_OPTION)
        logger.info(f"Desired size: {desired_size}, desired light: {desired_light}")

        if desired_size:
            selected[SIZE_OPTION] = self.select_size(desired_size)
        if desired_light:
            selected[LIGHT_OPTION] = self.select_light(desired_light)

        ignored = set(options) - {SIZE_OPTION, LIGHT_OPTION}
        if ignored:
            logger.warning(f"No selector for customization options: {sorted(ignored)}")
        return selected

    def displayed_product_price(self) -> str:
        outcome = self.interactor.read_text_first([PRODUCT_PRICE], accept=is_valid_price,
                                                  operation="read product price")
        price = require_price(outcome.value, "product page")
        logger.info(f"Product price found: {price}")
        return price

    def add_to_cart(self) -> ActionOutcome:
        outcome = self.interactor.click_first(ADD_TO_CART_BUTTONS, operation="add to cart")
        logger.info(f"Product added to cart via {outcome.strategy_name}")
        return outcome
