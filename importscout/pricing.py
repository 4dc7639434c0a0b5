from __future__ import annotations

import re
from typing import Optional

PRICE_CURRENCY = "EUR"

# "€12,345", "EUR 12.345", "€ 8 500"
PRICE_RE = re.compile(r"(?:€|EUR)\s?([0-9][0-9.,\s]{2,})", re.IGNORECASE)
_SEPARATORS_RE = re.compile(r"[\s.,]")


def infer_price(text: Optional[str]) -> Optional[int]:
    match = PRICE_RE.search(text or "")
    if not match:
        return None
    digits = _SEPARATORS_RE.sub("", match.group(1))
    if not digits.isdigit():
        return None
    return int(digits)
