"""
Cheapest-price extraction from converted page text.

Any currency-tagged number on the page counts, including ones that are not
fares. The pattern has no contextual guard: the result is the minimum
currency-tagged amount, not necessarily the cheapest fare.
"""

import re
from typing import List, Optional

from src.config.settings import CURRENCY_SYMBOL

PRICE_PATTERN = re.compile(re.escape(CURRENCY_SYMBOL) + r"(\d+(?:\.\d{1,2})?)")


def extract_prices(text: str) -> List[float]:
    """All currency-tagged amounts, in page order."""
    return [float(amount) for amount in PRICE_PATTERN.findall(text or "")]


def extract_cheapest(text: str) -> Optional[float]:
    prices = extract_prices(text)
    return min(prices) if prices else None
