"""
End-to-end price journeys.

A ``PriceJourney`` walks one scenario through login, search, product,
(optional) customization, cart and (optional) removal, recording the price
seen at each step. Transitions only move forward; any exception moves the
journey to FAILED and is re-raised. The ``run_*`` flows decide which
snapshots are compared for each kind of check.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pricecheck.fixtures.store import FixtureStore
from pricecheck.interaction.resilient import ResilientInteractor
from pricecheck.models.scenario import TestScenario
from pricecheck.pages.account_page import AccountPage
from pricecheck.pages.login_page import LoginPage
from pricecheck.pages.product_details_modal import ProductDetailsModal
from pricecheck.pages.product_page import ProductPage
from pricecheck.pages.search_results_page import SearchResultsPage
from pricecheck.pages.shopping_cart_page import ShoppingCartPage
from pricecheck.reporting.report import Reporter
from pricecheck.utils.errors import AssertionMismatch, InvalidTransition

logger = logging.getLogger(__name__)


class JourneyState(Enum):
    NOT_STARTED = "NotStarted"
    LOGGED_IN = "LoggedIn"
    SEARCHED = "Searched"
    PRODUCT_SELECTED = "ProductSelected"
    CUSTOMIZED = "Customized"
    ADDED_TO_CART = "AddedToCart"
    IN_CART = "InCart"
    ITEM_REMOVED = "ItemRemoved"
    DONE = "Done"
    FAILED = "Failed"


_TRANSITIONS = {
    JourneyState.NOT_STARTED: {JourneyState.LOGGED_IN},
    JourneyState.LOGGED_IN: {JourneyState.SEARCHED},
    JourneyState.SEARCHED: {JourneyState.PRODUCT_SELECTED},
    JourneyState.PRODUCT_SELECTED: {JourneyState.CUSTOMIZED, JourneyState.ADDED_TO_CART},
    JourneyState.CUSTOMIZED: {JourneyState.ADDED_TO_CART},
    JourneyState.ADDED_TO_CART: {JourneyState.IN_CART},
    JourneyState.IN_CART: {JourneyState.ITEM_REMOVED, JourneyState.DONE},
    JourneyState.ITEM_REMOVED: {JourneyState.DONE},
    JourneyState.DONE: set(),
    JourneyState.FAILED: set(),
}
TERMINAL_STATES = (JourneyState.DONE, JourneyState.FAILED)

# Keys of PriceJourney.prices
SEARCH_PRICE = "search"
PRODUCT_PRICE = "product"
CUSTOMIZED_PRICE = "customized"
CART_PRICE = "cart"


def assert_prices_equal(expected: Optional[str], actual: Optional[str], message: str) -> None:
    """Exact string equality: "$1,199.00" and "$1199.00" are different prices here."""
    logger.info(f"Assertion [EQUALS]: expected='{expected}', actual='{actual}'")
    if expected != actual:
        raise AssertionMismatch(expected, actual, message)


def assert_condition(condition: bool, message: str) -> None:
    logger.info(f"Assertion [TRUE]: {message}")
    if not condition:
        raise AssertionMismatch(True, False, message)


@dataclass
class JourneyPages:
    login: Any
    account: Any
    results: Any
    product: Any
    modal: Any
    cart: Any

    @classmethod
    def for_interactor(cls, interactor: ResilientInteractor) -> "JourneyPages":
        return cls(
            login=LoginPage(interactor),
            account=AccountPage(interactor),
            results=SearchResultsPage(interactor),
            product=ProductPage(interactor),
            modal=ProductDetailsModal(interactor),
            cart=ShoppingCartPage(interactor),
        )


@dataclass
class JourneyResult:
    flow: str
    state: JourneyState
    prices: Dict[str, str] = field(default_factory=dict)
    snapshot: Optional[TestScenario] = None
    snapshot_path: Optional[str] = None


class PriceJourney:
    """One scenario driven through one browser session."""

    def __init__(self,
                 session: Any,
                 scenario: TestScenario,
                 reporter: Optional[Reporter] = None,
                 pages: Optional[JourneyPages] = None,
                 store: Optional[FixtureStore] = None,
                 scenario_index: Optional[int] = None,
                 record_observed_price: bool = False,
                 environment: Optional[str] = None):
        self.session = session
        self.scenario = scenario
        self.reporter = reporter or Reporter()
        if pages is None:
            pages = JourneyPages.for_interactor(ResilientInteractor.from_settings(session.driver))
        self.pages = pages
        self.store = store
        self.scenario_index = scenario_index
        self.record_observed_price = record_observed_price
        if environment is None:
            from pricecheck.config import settings
            environment = settings.get_environment()
        self.environment = environment
        self.browser = getattr(session, "browser_name", "unknown")
        self.started_at = datetime.now()
        self.state = JourneyState.NOT_STARTED
        self.prices: Dict[str, str] = {}

    # State machine
    def _transition(self, target: JourneyState) -> None:
        if target == JourneyState.FAILED:
            if self.state in TERMINAL_STATES:
                raise InvalidTransition(f"Cannot fail a journey already in {self.state.value}")
        elif target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value} is not a forward transition")
        logger.info(f"Journey '{self.scenario.search_term}': {self.state.value} -> {target.value}")
        self.state = target

    def _step(self, description: str, action: Callable[[], Any],
              target: Optional[JourneyState] = None) -> Any:
        """Run one step inside a report step; any exception fails the journey."""
        try:
            with self.reporter.step(description):
                if target is not None and target not in _TRANSITIONS[self.state]:
                    raise InvalidTransition(f"{self.state.value} -> {target.value} is not a forward transition")
                result = action()
                if target is not None:
                    self._transition(target)
                return result
        except Exception as e:
            self.fail(e)
            raise

    def fail(self, error: BaseException) -> None:
        if self.state in TERMINAL_STATES:
            return
        logger.error(f"Journey '{self.scenario.search_term}' failed in {self.state.value}: {error}")
        self._transition(JourneyState.FAILED)
        self.reporter.attach_json("Scenario at failure", self.snapshot())

    def _record(self, key: str, price: str) -> str:
        self.prices[key] = price
        logger.info(f"{key} price: {price}")
        return price

    # Steps
    def login(self) -> None:
        self._step(f"Perform user login on {self.browser}", self.pages.login.login, JourneyState.LOGGED_IN)

    def search(self) -> None:
        term = self.scenario.search_term
        self._step(f"Search for product: {term}", lambda: self.pages.account.search(term), JourneyState.SEARCHED)

    def select_product(self) -> str:
        index = self.scenario.product_index
        price = self._step(f"Select product at index: {index}",
                           lambda: self.pages.results.select_product_and_get_price(index),
                           JourneyState.PRODUCT_SELECTED)
        self._record(SEARCH_PRICE, price)
        if self.record_observed_price and self.store is not None and self.scenario_index is not None:
            self._step("Record observed search price",
                       lambda: self.store.update_current_price(self.scenario_index, price))
        return price

    def customize(self) -> Dict[str, Optional[str]]:
        options = self.scenario.customization_options or {}
        return self._step(f"Apply product customizations: {options}",
                          lambda: self.pages.product.select_options(options), JourneyState.CUSTOMIZED)

    def read_product_price(self, key: str = PRODUCT_PRICE) -> str:
        price = self._step("Read product page price", self.pages.product.displayed_product_price)
        return self._record(key, price)

    def add_to_cart(self) -> None:
        self._step("Add product to shopping cart", self.pages.product.add_to_cart, JourneyState.ADDED_TO_CART)

    def open_cart(self) -> None:
        self._step("Navigate to shopping cart", self.pages.modal.view_cart, JourneyState.IN_CART)

    def read_cart_price(self) -> str:
        price = self._step("Read cart price", self.pages.cart.displayed_product_price)
        return self._record(CART_PRICE, price)

    def remove_item(self) -> None:
        self._step("Remove item from shopping cart", self.pages.cart.delete_item, JourneyState.ITEM_REMOVED)

    def check(self, description: str, assertion: Callable[[], None]) -> None:
        self._step(description, assertion)

    def finish(self) -> None:
        self._transition(JourneyState.DONE)

    # Reporting
    def snapshot(self, **prices: Optional[str]) -> TestScenario:
        """Copy of the scenario with the given price fields and capture metadata filled in."""
        data = self.scenario.model_copy(deep=True)
        for name, value in prices.items():
            setattr(data, name, value)
        data.mark_captured(self.browser, self.environment, self.started_at)
        return data

    def save_snapshot(self, flow: str, snapshot: TestScenario) -> Optional[str]:
        self.reporter.attach_json(f"{flow} price data", snapshot)
        return self.reporter.save_snapshot_json(snapshot, flow, self.browser, self.started_at)

    def report_parameters(self) -> None:
        self.reporter.add_parameters({
            "Search Term": self.scenario.search_term,
            "Expected Price": self.scenario.current_price,
            "Product Index": self.scenario.product_index,
            "Browser": self.browser,
            "Customization Options": self.scenario.customization_options,
        })

    def result(self, flow: str, snapshot: Optional[TestScenario], path: Optional[str]) -> JourneyResult:
        return JourneyResult(flow=flow, state=self.state, prices=dict(self.prices),
                             snapshot=snapshot, snapshot_path=path)


def journey_for_scenario(session: Any,
                         scenario: TestScenario,
                         store: FixtureStore,
                         index: int,
                         record_observed_price: bool = False,
                         **kwargs: Any) -> PriceJourney:
    """
    Journey for the scenario at ``index`` of ``store``.

    Built-in fallback scenarios have no record in the document, so a store
    that fell back gets no write-back target.
    """
    if store.using_fallback:
        if record_observed_price:
            logger.warning(f"Not recording prices for fallback scenario {scenario.search_term!r}: "
                           f"{store.path} was not loaded")
        return PriceJourney(session, scenario, **kwargs)
    return PriceJourney(session, scenario, store=store, scenario_index=index,
                        record_observed_price=record_observed_price, **kwargs)


def _shop_to_cart(journey: PriceJourney, customize: bool) -> None:
    journey.report_parameters()
    journey.login()
    journey.search()
    journey.select_product()
    if customize and journey.scenario.has_customization_options():
        journey.customize()
        journey.read_product_price(CUSTOMIZED_PRICE)
    else:
        journey.read_product_price()
    journey.add_to_cart()
    journey.open_cart()
    journey.read_cart_price()


def run_complete_price_journey(journey: PriceJourney) -> JourneyResult:
    """Search results price == product page price == cart price."""
    flow = "complete-journey"
    _shop_to_cart(journey, customize=False)
    prices = journey.prices
    snapshot = journey.snapshot(current_price=prices[SEARCH_PRICE],
                                expected_price=journey.scenario.current_price,
                                new_price=prices[CART_PRICE])
    path = journey.save_snapshot(flow, snapshot)

    journey.check("Search results price matches product page price",
                  lambda: assert_prices_equal(prices[SEARCH_PRICE], prices[PRODUCT_PRICE],
                                              "Price should be consistent between search results and product details"))
    journey.check("Product page price matches cart price",
                  lambda: assert_prices_equal(prices[PRODUCT_PRICE], prices[CART_PRICE],
                                              "Price should be consistent between product details and cart"))
    journey.reporter.attach_screenshot(journey.session, f"Complete Price Journey Validation - {journey.browser}")
    journey.remove_item()
    journey.finish()
    logger.info(f"Complete price journey validation completed. Data saved to: {path}")
    return journey.result(flow, snapshot, path)


def _customized_snapshot(journey: PriceJourney) -> TestScenario:
    prices = journey.prices
    return journey.snapshot(current_price=prices[SEARCH_PRICE],
                            new_price=prices.get(CUSTOMIZED_PRICE, prices.get(PRODUCT_PRICE)),
                            expected_price=prices[CART_PRICE])


def run_customization_journey(journey: PriceJourney) -> JourneyResult:
    """Price after applying the customization options == cart price."""
    flow = "customization"
    _shop_to_cart(journey, customize=True)
    snapshot = _customized_snapshot(journey)
    path = journey.save_snapshot(flow, snapshot)

    journey.check("Customized price matches cart price",
                  lambda: assert_prices_equal(snapshot.new_price, journey.prices[CART_PRICE],
                                              "Customized price should match cart price"))
    journey.reporter.attach_screenshot(journey.session, f"Customization Price Validation - {journey.browser}")
    journey.remove_item()
    journey.finish()
    return journey.result(flow, snapshot, path)


def run_cart_icon_check(journey: PriceJourney) -> JourneyResult:
    """After adding one product the cart icon shows its item count."""
    flow = "cart-icon"
    _shop_to_cart(journey, customize=True)
    snapshot = _customized_snapshot(journey)
    path = journey.save_snapshot(flow, snapshot)

    journey.check("Cart icon displays the item count",
                  lambda: assert_condition(journey.pages.cart.is_cart_icon_item_count_displayed(),
                                           f"Cart icon should display '1' after adding a product on browser: "
                                           f"{journey.browser}"))
    journey.reporter.attach_screenshot(journey.session, f"Cart icon displays 1 after adding an item - {journey.browser}")
    journey.remove_item()
    journey.finish()
    return journey.result(flow, snapshot, path)


def run_item_removal_check(journey: PriceJourney) -> JourneyResult:
    """Removing the product from the cart shows the removal confirmation."""
    flow = "item-removal"
    _shop_to_cart(journey, customize=True)
    snapshot = _customized_snapshot(journey)
    path = journey.save_snapshot(flow, snapshot)

    journey.remove_item()
    journey.check("Item removal confirmation is displayed",
                  lambda: assert_condition(journey.pages.cart.is_item_removed_message_displayed(),
                                           f"Item removal confirmation should be displayed on browser: "
                                           f"{journey.browser}"))
    journey.reporter.attach_screenshot(journey.session, f"Removal confirmation - {journey.browser}")
    journey.finish()
    return journey.result(flow, snapshot, path)
