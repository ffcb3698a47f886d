"""
Search results page object
"""
import logging
from typing import Any, List

from pricecheck.extractors.price_parser import is_valid_price, require_price
from pricecheck.interaction.resilient import ResilientInteractor

logger = logging.getLogger(__name__)

PRODUCT_CARDS = "div[class*='col-md-4']"
CARD_SALE_PRICE = "span[class*='productCard_prod-sale-price']"


class SearchResultsPage:
    def __init__(self, interactor: ResilientInteractor):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor

    def product_cards(self) -> List[Any]:
        cards = self.interactor.wait_for_elements(PRODUCT_CARDS)
        logger.info(f"Number of products found: {len(cards)}")
        return cards

    def _card_at(self, product_index: int) -> Any:
        if product_index < 1:
            raise ValueError(f"productIndex is 1-based, got {product_index}")
        cards = self.product_cards()
        if product_index > len(cards):
            raise IndexError(f"productIndex {product_index} out of range: {len(cards)} products found")
        return cards[product_index - 1]

    def select_product_and_get_price(self, product_index: int) -> str:
        """
        Read the price off the product card at ``product_index`` (1-based), then open it.

        Raises:
            PriceNotFound: the card text carries no price
        """
        card = self._card_at(product_index)
        price = require_price(self.interactor.driver.text(card), f"search result card {product_index}")
        logger.info(f"Extracted price of product: {price}")
        self.interactor.click(card, operation="open product")
        self.interactor.driver.wait_for_page_load()
        logger.info(f"Navigated to product page of item at productIndex {product_index}")
        return price

    def displayed_product_price(self) -> str:
        outcome = self.interactor.read_text_first([CARD_SALE_PRICE], accept=is_valid_price,
                                                  operation="read search results price")
        price = require_price(outcome.value, "search results page")
        logger.info(f"Product price found on Search Result Page: {price}")
        return price
