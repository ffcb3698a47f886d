"""
Tests for page objects against in-memory pages.
"""
import pytest

from pricecheck.pages.account_page import AccountPage
from pricecheck.pages.login_page import LoginPage
from pricecheck.pages.page_utils import dismiss_cookie_banner
from pricecheck.pages.product_details_modal import ProductDetailsModal
from pricecheck.pages.product_page import ADD_TO_CART_BUTTONS, ProductPage, light_matches, size_matches
from pricecheck.pages.search_results_page import SearchResultsPage
from pricecheck.pages.shopping_cart_page import CART_PRICE, DOLLAR_TEXT, PRICE_SELECTORS, ShoppingCartPage
from pricecheck.utils.errors import MissingCredentialsError, NoInteractableElementFound, PriceNotFound

RESULTS_HTML = """
<div class="row">
  <div class="col-md-4" id="card1"><a href="/p/1">Alpine Balsam Fir <span>$1,199.00</span></a></div>
  <div class="col-md-4" id="card2"><a href="/p/2">Vermont White Spruce List <s>$1,499</s> Save <b>$999</b></a></div>
  <div class="col-md-4" id="card3"><a href="/p/3">Gift Card</a></div>
</div>
"""

PRODUCT_HTML = """
<div class="productPrice_old-new-price__a0Rwo"><span class="product-price">$1,049.00</span></div>
<div class="small-product-filter-box productDetailFilter_product-filter-item__q1" id="s1">6.5 ft</div>
<div class="small-product-filter-box productDetailFilter_product-filter-item__q1" id="s2">7.5 FT</div>
<div class="large-product-filter-box productDetailFilter_product-filter-item__q1" id="l1">Color + Clear</div>
<div class="large-product-filter-box productDetailFilter_product-filter-item__q1" id="l2">Clear&reg;</div>
<div class="row align-items-center h-100"><button id="atc">Add to Cart</button></div>
"""


def test_cookie_banner_dismissed_with_its_button(make_interactor):
    interactor = make_interactor(
        '<div id="cookieBanner"><button id="accept" data-testid="cookie-accept">OK</button></div>'
    )
    assert dismiss_cookie_banner(interactor) is True
    assert interactor.driver.clicks == [("direct", "accept")]
    assert interactor.driver.scripts == []


def test_cookie_banner_hidden_by_script_when_no_button_works(make_interactor):
    interactor = make_interactor('<div id="cookieBanner"><p>We use cookies</p></div>')
    assert dismiss_cookie_banner(interactor) is True
    assert len(interactor.driver.scripts) == 1
    assert not interactor.is_displayed("#cookieBanner", timeout_s=0)


def test_no_cookie_banner(make_interactor):
    interactor = make_interactor("<main></main>")
    assert dismiss_cookie_banner(interactor) is False


def test_login_uses_environment_credentials(make_interactor, monkeypatch):
    monkeypatch.setenv("BH_USERNAME", "shopper@example.com")
    monkeypatch.setenv("BH_PASSWORD", "s3cret")
    interactor = make_interactor(
        '<input name="emailAddress"><input name="password" type="password">'
        '<button id="login" data-testid="login-btn-login">Log in</button>'
    )
    LoginPage(interactor).login()
    assert interactor.driver.typed == [("emailAddress", "shopper@example.com"), ("password", "s3cret")]
    assert interactor.driver.clicks == [("direct", "login")]
    assert interactor.driver.page_loads == 1


def test_login_without_credentials(make_interactor):
    with pytest.raises(MissingCredentialsError):
        LoginPage(make_interactor("<form></form>")).login()


def test_page_objects_need_an_interactor():
    with pytest.raises(ValueError):
        ShoppingCartPage(None)


def test_search_types_and_submits(make_interactor):
    interactor = make_interactor('<input id="constructor-search-input">')
    AccountPage(interactor).search("Christmas Tree")
    assert interactor.driver.typed == [("constructor-search-input", "Christmas Tree")]
    assert interactor.driver.pressed == [("constructor-search-input", "Enter")]
    assert interactor.driver.page_loads == 1


class TestSearchResultsPage:

    def test_select_product_reads_card_price_then_opens_it(self, make_interactor):
        interactor = make_interactor(RESULTS_HTML)
        price = SearchResultsPage(interactor).select_product_and_get_price(2)
        assert price == "$999"
        assert interactor.driver.clicks == [("direct", "card2")]
        assert interactor.driver.page_loads == 1

    def test_last_price_without_cues(self, make_interactor):
        page = SearchResultsPage(make_interactor(RESULTS_HTML))
        assert page.select_product_and_get_price(1) == "$1,199.00"

    def test_card_without_price(self, make_interactor):
        interactor = make_interactor(RESULTS_HTML)
        with pytest.raises(PriceNotFound):
            SearchResultsPage(interactor).select_product_and_get_price(3)
        assert interactor.driver.clicks == []

    def test_index_out_of_range(self, make_interactor):
        page = SearchResultsPage(make_interactor(RESULTS_HTML))
        with pytest.raises(IndexError):
            page.select_product_and_get_price(4)
        with pytest.raises(ValueError):
            page.select_product_and_get_price(0)

    def test_displayed_product_price(self, make_interactor):
        interactor = make_interactor('<span class="productCard_prod-sale-price__z">Sale $649.00</span>')
        assert SearchResultsPage(interactor).displayed_product_price() == "$649.00"


class TestProductPage:

    def test_option_matchers(self):
        assert size_matches("7.5")("7.5 FT")
        assert not size_matches("9")("7.5 ft")
        assert light_matches("Clear")("Clear®")
        assert light_matches("clear")(" Clear ")
        assert not light_matches("Clear")("Color + Clear")

    def test_select_options(self, make_interactor):
        interactor = make_interactor(PRODUCT_HTML)
        selected = ProductPage(interactor).select_options(
            {"size": "7.5 ft", "lightType": "Clear", "ribbon": "Red Velvet"}
        )
        assert selected == {"size": "7.5 FT", "lightType": "Clear®"}
        assert interactor.driver.clicks == [("direct", "s2"), ("direct", "l2")]

    def test_unmatched_option_is_reported_as_none(self, make_interactor):
        interactor = make_interactor(PRODUCT_HTML)
        assert ProductPage(interactor).select_options({"size": "12 ft"}) == {"size": None}
        assert interactor.driver.clicks == []

    def test_no_options(self, make_interactor):
        assert ProductPage(make_interactor(PRODUCT_HTML)).select_options(None) == {}

    def test_displayed_price(self, make_interactor):
        assert ProductPage(make_interactor(PRODUCT_HTML)).displayed_product_price() == "$1,049.00"

    def test_add_to_cart_primary_button(self, make_interactor):
        interactor = make_interactor(PRODUCT_HTML)
        outcome = ProductPage(interactor).add_to_cart()
        assert outcome.strategy_index == 0
        assert interactor.driver.clicks == [("direct", "atc")]

    def test_add_to_cart_text_fallback(self, make_interactor):
        interactor = make_interactor('<div class="pdp"><button id="atc2" class="atc">ADD TO CART</button></div>')
        interactor.driver.xpath_aliases[ADD_TO_CART_BUTTONS[1]] = "button.atc"
        outcome = ProductPage(interactor).add_to_cart()
        assert outcome.strategy_index == 1
        assert interactor.driver.clicks == [("direct", "atc2")]

    def test_add_to_cart_missing(self, make_interactor):
        with pytest.raises(NoInteractableElementFound) as excinfo:
            ProductPage(make_interactor("<div></div>")).add_to_cart()
        assert excinfo.value.attempted == 2


def test_view_cart_falls_back_to_cart_buttons(make_interactor):
    interactor = make_interactor(
        '<button data-testid="pdc-add-to-cart-modal-btn-viewcart" hidden>View Cart</button>'
        '<button id="minicart" class="header-cart-btn">Cart</button>'
    )
    outcome = ProductDetailsModal(interactor).view_cart()
    assert outcome.strategy_index == 2
    assert interactor.driver.clicks == [("direct", "minicart")]


class TestShoppingCartPage:

    def test_price_from_cart_price_span(self, make_interactor):
        interactor = make_interactor(
            '<span class="cartProductDetailItem_new_price__k2"><span>$1,049.00</span></span>'
            '<span class="price">$5.00</span>'
        )
        assert ShoppingCartPage(interactor).displayed_product_price() == "$1,049.00"

    def test_price_from_generic_selectors(self, make_interactor):
        interactor = make_interactor('<div class="cart-item-price">$349.00</div>')
        assert ShoppingCartPage(interactor).displayed_product_price() == "$349.00"

    def test_cart_price_span_is_polled_by_one_strategy_only(self, make_interactor):
        interactor = make_interactor('<div class="cart-item-price">$349.00</div>')
        ShoppingCartPage(interactor).displayed_product_price()

        span_calls = [i for i, c in enumerate(interactor.driver.find_calls) if c == CART_PRICE]
        assert span_calls
        assert span_calls == list(range(len(span_calls)))
        assert CART_PRICE not in PRICE_SELECTORS

    def test_price_from_dollar_text(self, make_interactor):
        interactor = make_interactor('<p id="total">Total: $59.00</p>')
        interactor.driver.xpath_aliases[DOLLAR_TEXT] = "#total"
        page = ShoppingCartPage(interactor)
        assert page.displayed_product_price() == "$59.00"

    def test_price_from_page_text_scan(self, make_interactor):
        interactor = make_interactor("<main><p>Subtotal</p><p>$89.99</p></main>")
        assert ShoppingCartPage(interactor).displayed_product_price() == "$89.99"

    def test_hidden_prices_are_skipped(self, make_interactor):
        interactor = make_interactor(
            '<span class="cartProductDetailItem_new_price__k2" hidden><span>$1.00</span></span>'
            '<span class="product-price">$12.00</span>'
        )
        assert ShoppingCartPage(interactor).displayed_product_price() == "$12.00"

    def test_no_price_anywhere(self, make_interactor):
        interactor = make_interactor("<main><p>Your cart is empty</p></main>")
        with pytest.raises(NoInteractableElementFound):
            ShoppingCartPage(interactor).displayed_product_price()

    def test_delete_item(self, make_interactor):
        interactor = make_interactor('<button id="del" data-testid="delete-button">Remove</button>')
        outcome = ShoppingCartPage(interactor).delete_item()
        assert outcome.strategy_name == "[data-testid='delete-button']"
        assert interactor.driver.clicks == [("direct", "del")]

    def test_delete_item_missing(self, make_interactor):
        with pytest.raises(NoInteractableElementFound):
            ShoppingCartPage(make_interactor("<main></main>")).delete_item()

    def test_cart_indicators(self, make_interactor):
        interactor = make_interactor(
            '<input id="productQuantityInput_0_desktop" value="1">'
            '<div class="cartProductDetailItem_product-name-wrapper__2Yaco"><a href="/p/1"><span>Fir</span></a></div>'
        )
        page = ShoppingCartPage(interactor)
        assert page.is_cart_icon_item_count_displayed() is True
        assert page.is_item_removed_message_displayed() is True
        assert ShoppingCartPage(make_interactor("<main></main>")).is_cart_icon_item_count_displayed() is False
