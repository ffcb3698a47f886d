"""
My Account page object: the landing page after login, used for its header search box
"""
import logging

from pricecheck.interaction.resilient import ResilientInteractor

logger = logging.getLogger(__name__)

SEARCH_INPUT = "#constructor-search-input"


class AccountPage:
    def __init__(self, interactor: ResilientInteractor):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor

    def enter_search_term(self, term: str) -> None:
        self.interactor.type_into([SEARCH_INPUT], term, operation="enter search term")

    def submit_search(self) -> None:
        self.interactor.press([SEARCH_INPUT], "Enter", operation="submit search")

    def search(self, term: str) -> None:
        self.enter_search_term(term)
        self.submit_search()
        self.interactor.driver.wait_for_page_load()
        logger.info(f"Search completed for term: {term}")
