"""
Shopping cart page object.

The cart price is looked up through four strategies, most specific first:
the known price span, a list of generic price selectors, any element whose
own text carries a "$", and finally a scan of the whole page text.
"""
import logging
from typing import Any, Callable, List

from pricecheck.extractors.price_parser import is_valid_price, is_valid_price_format, require_price
from pricecheck.interaction.resilient import ActionOutcome, ResilientInteractor, Strategy, VISIBLE

logger = logging.getLogger(__name__)

CART_PRICE = "span[class*='cartProductDetailItem_new_price'] > span"
PRICE_SELECTORS = [
    "span[class*='cartProductDetailItem_new_price']",
    "span[class*='new_price']",
    "span[class*='price']",
    ".price",
    "[class*='price']",
    ".cart-item-price",
    ".product-price",
    "[data-testid*='price']",
]
DOLLAR_TEXT = "xpath=//*[contains(text(), '$')]"
PAGE_BODY = "body"

DELETE_BUTTONS = [
    ".delete.cartProductDetailItem_delete-icon__8MHyf",
    "[data-testid='delete-button']",
    ".delete-icon",
    "button[title*='delete'], button[title*='remove']",
    "xpath=//button[@aria-label[contains(., 'delete') or contains(., 'remove')]]",
]
LOADER = ".bLoader_loader-wrapper-box__q4A7u"
CART_ITEM_QUANTITY = "#productQuantityInput_0_desktop"
CART_ITEM_NAME = "div.cartProductDetailItem_product-name-wrapper__2Yaco a > span"


class ShoppingCartPage:
    def __init__(self, interactor: ResilientInteractor, page_load_timeout_s: float = 15,
                 settle_s: float = 2):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor
        self.page_load_timeout_s = page_load_timeout_s
        self.settle_s = settle_s

    @property
    def driver(self):
        return self.interactor.driver

    def _elements_with_text(self, selector: str, accept: Callable[[str], bool]) -> Callable[[], List[Any]]:
        def _locate() -> List[Any]:
            return [e for e in self.driver.find_elements(selector) if accept(self.driver.text(e))]
        return _locate

    def price_strategies(self) -> List[Strategy]:
        strategies = [Strategy("cart price span", self._elements_with_text(CART_PRICE, is_valid_price),
                               self.driver.text, timeout_s=3)]
        strategies += [
            Strategy(f"price selector {selector}", self._elements_with_text(selector, is_valid_price),
                     self.driver.text, timeout_s=2)
            for selector in PRICE_SELECTORS
        ]
        strategies.append(Strategy("text containing $", self._elements_with_text(DOLLAR_TEXT, is_valid_price_format),
                                   self.driver.text, timeout_s=3))
        strategies.append(Strategy("page text scan", self._elements_with_text(PAGE_BODY, is_valid_price_format),
                                   self._first_formatted_price, timeout_s=2))
        return strategies

    def _first_formatted_price(self, element: Any) -> str:
        text = self.driver.text(element)
        for line in text.splitlines():
            if is_valid_price_format(line):
                return line.strip()
        return text

    def wait_for_cart_to_load(self) -> None:
        self.driver.wait_for_page_load(self.page_load_timeout_s)
        if self.settle_s:
            self.driver.pause(self.settle_s)

    def displayed_product_price(self) -> str:
        """
        Raises:
            NoInteractableElementFound: no strategy found a price on the page
            PriceNotFound: the text found carries no parsable price
        """
        self.wait_for_cart_to_load()
        outcome = self.interactor.locate_and_act(self.price_strategies(), condition=VISIBLE,
                                                 operation="read cart price")
        price = require_price(outcome.value, "shopping cart")
        logger.info(f"Found cart price {price} using strategy: {outcome.strategy_name}")
        return price

    def delete_item(self) -> ActionOutcome:
        self.interactor.wait_for_loader(LOADER)
        outcome = self.interactor.click_first(DELETE_BUTTONS, operation="delete cart item", timeout_s=2)
        self.interactor.wait_for_loader(LOADER, appear_timeout_s=2, timeout_s=15)
        logger.info(f"Successfully deleted item using selector: {outcome.strategy_name}")
        return outcome

    def is_cart_icon_item_count_displayed(self) -> bool:
        return self.interactor.is_displayed(CART_ITEM_QUANTITY)

    def is_item_removed_message_displayed(self) -> bool:
        return self.interactor.is_displayed(CART_ITEM_NAME)
