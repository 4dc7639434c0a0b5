"""Per-marketplace rules for telling listing pages from category pages.

The rules are literal substring checks tied to each marketplace's current URL
scheme. Hosts without an entry are accepted as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

REASON_NOT_LISTING = "not a listing page"
REASON_CATEGORY_PAGE = "category page"


@dataclass(frozen=True, slots=True)
class DomainRule:
    require_any: tuple[str, ...] = ()
    reject_any: tuple[str, ...] = ()

    def rejection_reason(self, url: str) -> Optional[str]:
        if self.require_any and not any(marker in url for marker in self.require_any):
            return REASON_NOT_LISTING
        if any(marker in url for marker in self.reject_any):
            return REASON_CATEGORY_PAGE
        return None


MOBILE_DE_RULE = DomainRule(require_any=("details.html", "fahrzeuge/details", "id="))

DOMAIN_RULES: dict[str, DomainRule] = {
    "mobile.de": MOBILE_DE_RULE,
    "suchen.mobile.de": MOBILE_DE_RULE,
    "leboncoin.fr": DomainRule(reject_any=("/ck/",)),
}


def domain_rejection(domain: str, url: str, rules: Optional[dict[str, DomainRule]] = None) -> Optional[str]:
    table = DOMAIN_RULES if rules is None else rules
    rule = table.get(domain)
    if rule is None:
        return None
    return rule.rejection_reason(url)
