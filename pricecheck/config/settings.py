"""
Configuration and environment variable handling for the price-check suite.

Lookup order for every setting: environment variable, then the JSON config
file (``CONFIG_FILE``, default ``config/config.json``), then the built-in
default. Credentials are read from the environment only.
"""
import os
import json
import logging
from functools import lru_cache
from typing import Any, List

from pricecheck.utils.errors import MissingCredentialsError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config/config.json"
_TRUE_VALUES = ("1", "true", "yes")


@lru_cache(maxsize=None)
def _load_config_file(path: str) -> dict:
    if not os.path.exists(path):
        logger.debug(f"Config file not found at {path}; using environment and defaults")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level is not an object")
        return {}
    logger.info(f"Configuration loaded from {path}")
    return data


def get_config_file() -> str:
    """Get path of the JSON config file."""
    return os.environ.get("CONFIG_FILE", DEFAULT_CONFIG_FILE)


def reload_config() -> None:
    """Drop the cached config file so the next lookup re-reads it."""
    _load_config_file.cache_clear()


def _file_value(path: str) -> Any:
    """Look up a dotted key (e.g. ``timeout.explicit``) in the config file."""
    current: Any = _load_config_file(get_config_file())
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _raw(env_var: str, file_key: str) -> Any:
    value = os.environ.get(env_var)
    if value is not None:
        return value
    return _file_value(file_key)


def _get_str(env_var: str, file_key: str, default: str) -> str:
    value = _raw(env_var, file_key)
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or str(value).strip() == "":
        return default
    return str(value)


def _get_int(env_var: str, file_key: str, default: int) -> int:
    value = _raw(env_var, file_key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _get_float(env_var: str, file_key: str, default: float) -> float:
    value = _raw(env_var, file_key)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _get_bool(env_var: str, file_key: str, default: bool) -> bool:
    value = _raw(env_var, file_key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in _TRUE_VALUES


def get_browser_type() -> str:
    """Get browser type to use. A list in the config file yields its first entry."""
    return _get_str("BROWSER", "browser", "chromium").lower()


def get_browsers() -> List[str]:
    """Get all configured browsers (cross-browser runs)."""
    env_value = os.environ.get("BROWSERS")
    if env_value:
        return [b.strip().lower() for b in env_value.split(",") if b.strip()]
    file_value = _file_value("browser")
    if isinstance(file_value, list) and file_value:
        return [str(b).lower() for b in file_value]
    return [get_browser_type()]


def get_base_url() -> str:
    """Get the URL every session opens first."""
    return _get_str("BASE_URL", "baseUrl", "https://www.balsamhill.com/login")


def is_headless() -> bool:
    """Check if browser should run in headless mode."""
    return _get_bool("HEADLESS", "headless", True)


def get_slow_mo_ms() -> int:
    """Get slow motion delay in milliseconds."""
    return _get_int("SLOW_MO_MS", "slowMo", 0)


def get_implicit_timeout_s() -> int:
    """Get default timeout applied to every Playwright action."""
    return _get_int("IMPLICIT_TIMEOUT_S", "timeout.implicit", 10)


def get_explicit_timeout_s() -> int:
    """Get wait budget for each locate attempt of the resilient interactor."""
    return _get_int("EXPLICIT_TIMEOUT_S", "timeout.explicit", 15)


def get_page_load_timeout_s() -> int:
    """Get navigation timeout."""
    return _get_int("PAGE_LOAD_TIMEOUT_S", "timeout.pageLoad", 60)


def get_poll_interval_s() -> float:
    """Get delay between checks of a polling wait."""
    return _get_float("POLL_INTERVAL_S", "timeout.poll", 0.25)


def get_max_retry_attempts() -> int:
    """Get outer retry bound for dynamic option lists."""
    return _get_int("RETRY_MAX_ATTEMPTS", "retry.maxAttempts", 3)


def is_retry_enabled() -> bool:
    return _get_bool("RETRY_ENABLED", "retry.enabled", True)


def is_screenshot_on_failure() -> bool:
    """Check if a screenshot should be attached when a test fails."""
    return _get_bool("SCREENSHOT_ON_FAILURE", "screenshot.onFailure", True)


def get_screenshot_dir() -> str:
    """Get directory for failure screenshots."""
    return _get_str("SCREENSHOT_DIR", "screenshot.path", "test-results/screenshots")


def get_test_data_file() -> str:
    """Get path of the JSON scenario document."""
    return _get_str("TEST_DATA_FILE", "testData.path", "data/testdata.json")


def get_price_capture_dir() -> str:
    """Get directory for per-journey price snapshots."""
    return _get_str("PRICE_CAPTURE_DIR", "testData.captureDir", "test-results/price-capture")


def is_record_observed_price() -> bool:
    """Check if the live suite writes the observed search price back to the scenario document."""
    return _get_bool("RECORD_OBSERVED_PRICE", "testData.recordObserved", False)


def get_environment() -> str:
    return _get_str("TEST_ENVIRONMENT", "environment", "staging")


def _credential(env_var: str) -> str:
    value = (os.environ.get(env_var) or "").strip()
    if not value:
        raise MissingCredentialsError(f"Environment variable {env_var} is not set or empty")
    return value


def get_username() -> str:
    """Get login e-mail from BH_USERNAME."""
    return _credential("BH_USERNAME")


def get_password() -> str:
    """Get login password from BH_PASSWORD."""
    return _credential("BH_PASSWORD")


def has_credentials() -> bool:
    try:
        get_username()
        get_password()
    except MissingCredentialsError:
        return False
    return True


def describe() -> str:
    """One-line summary of the effective configuration (no secrets)."""
    return (
        f"browser={get_browser_type()} base_url={get_base_url()} headless={is_headless()} "
        f"explicit_timeout={get_explicit_timeout_s()}s retries={get_max_retry_attempts()} "
        f"test_data={get_test_data_file()}"
    )
