"""
Price parsing utilities for product card, product page and cart text.
"""
import re
import logging
from typing import List, Optional

from pricecheck.utils.errors import PriceNotFound

logger = logging.getLogger(__name__)

# Handles $1,199 $999 $1,999.99 $99.99
PRICE_PATTERN = re.compile(r"\$[0-9,]+(?:\.[0-9]{2})?")
_INTEGER_PATTERN = re.compile(r"-?\d+")
_VALID_PRICE = re.compile(r"\$\d+")
_VALID_PRICE_FORMAT = re.compile(r"\$\d+\.\d{2}")


def find_all_prices(text: Optional[str]) -> List[str]:
    """Return every $-amount in ``text``, in order of appearance."""
    if not text:
        return []
    return PRICE_PATTERN.findall(text)


def extract_price(text: Optional[str]) -> Optional[str]:
    """
    Extract the price a shopper would pay from a block of display text.

    - "save" present: the 2nd price if there are at least two, else the 1st
      ("was $X save $Y").
    - "free shipping" / "free-shipping" present: the last price.
    - no cue: the last price.

    The second price under "save" is taken positionally; it is not checked
    to be lower than the first.

    Args:
        text: Rendered text of a product card or price block

    Returns:
        The price string exactly as displayed (e.g. "$1,199.00"), or None
    """
    if text is None or not text.strip():
        return None

    prices = find_all_prices(text)
    if not prices:
        logger.debug(f"No prices found in text: {text!r}")
        return None

    lowered = text.lower()
    has_save = "save" in lowered
    has_free_shipping = "free shipping" in lowered or "free-shipping" in lowered

    if has_save:
        result = prices[1] if len(prices) >= 2 else prices[0]
        logger.debug(f"Save detected -> 2nd price (or 1st if only one): {result} from {prices}")
    elif has_free_shipping:
        result = prices[-1]
        logger.debug(f"Free shipping detected -> last price: {result} from {prices}")
    else:
        result = prices[-1]
        logger.debug(f"No keywords -> last price: {result} from {prices}")
    return result


def require_price(text: Optional[str], where: str) -> str:
    """Same as ``extract_price`` but raises PriceNotFound instead of returning None."""
    price = extract_price(text)
    if price is None:
        raise PriceNotFound(where, text)
    return price


def extract_first_integer(text: Optional[str], default: int = 0) -> int:
    """
    Extract the first integer from text.

    "298 Results" -> 298, "Price: $25.99" -> 25, "No items" -> default
    """
    if text is None or not text.strip():
        return default
    match = _INTEGER_PATTERN.search(text)
    if not match:
        return default
    try:
        return int(match.group(0))
    except ValueError:
        return default


def is_valid_price(text: Optional[str]) -> bool:
    """True if text carries a $ followed by a digit."""
    return bool(text) and _VALID_PRICE.search(text) is not None


def is_valid_price_format(text: Optional[str]) -> bool:
    """True if text carries a full $dd.dd amount."""
    return bool(text) and _VALID_PRICE_FORMAT.search(text) is not None
