"""
The modal shown after adding a product to the cart
"""
import logging

from pricecheck.interaction.resilient import ActionOutcome, ResilientInteractor

logger = logging.getLogger(__name__)

VIEW_CART_BUTTONS = [
    "button[data-testid='pdc-add-to-cart-modal-btn-viewcart']",
    "xpath=//button[contains(text(), 'View Cart') or contains(text(), 'VIEW CART')]",
    "button[class*='cart'], button[data-testid*='cart']",
]


class ProductDetailsModal:
    def __init__(self, interactor: ResilientInteractor):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor

    def view_cart(self) -> ActionOutcome:
        logger.debug(f"Looking for View Cart button on {self.interactor.driver.current_url}")
        outcome = self.interactor.click_first(VIEW_CART_BUTTONS, operation="view cart")
        self.interactor.driver.wait_for_page_load()
        logger.info("Navigated to shopping cart")
        return outcome
