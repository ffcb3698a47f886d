"""
Login page object
"""
import logging
from typing import Optional

from pricecheck.config import settings
from pricecheck.interaction.resilient import ResilientInteractor

logger = logging.getLogger(__name__)

EMAIL_INPUT = "input[name='emailAddress']"
PASSWORD_INPUT = "input[name='password']"
LOGIN_BUTTON = "button[data-testid='login-btn-login']"


class LoginPage:
    def __init__(self, interactor: ResilientInteractor):
        if interactor is None:
            raise ValueError("Interactor cannot be None")
        self.interactor = interactor

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> None:
        """Submit the login form. Credentials default to BH_USERNAME / BH_PASSWORD."""
        username = username or settings.get_username()
        password = password or settings.get_password()

        self.interactor.type_into([EMAIL_INPUT], username, operation="enter username")
        logger.info(f"Username entered: {username}")
        self.interactor.type_into([PASSWORD_INPUT], password, operation="enter password")
        logger.info("Password entered")
        self.interactor.click_first([LOGIN_BUTTON], operation="submit login")
        self.interactor.driver.wait_for_page_load()
        logger.info("Login submitted")
