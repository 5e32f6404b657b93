"""
Fixed category -> domain partition.

Ten categories are grouped into three domains. The mapping is validated once at
import so scoring never has to tolerate a partial or overlapping partition.
"""

from typing import Dict, List, Tuple

from polrisk.domain.exceptions import TaxonomyError, UnknownCategoryError, UnknownDomainError

CATEGORY_IDS: Tuple[str, ...] = (
    "elections",
    "rule-of-law",
    "national-security",
    "regulatory-stability",
    "trade-policy",
    "government-contracts",
    "fiscal-policy",
    "media-freedom",
    "civil-discourse",
    "institutional-integrity",
)

CATEGORY_NAMES: Dict[str, str] = {
    "elections": "Elections",
    "rule-of-law": "Rule of Law",
    "national-security": "National Security",
    "regulatory-stability": "Regulatory Stability",
    "trade-policy": "Trade Policy",
    "government-contracts": "Government Contracts",
    "fiscal-policy": "Fiscal Policy",
    "media-freedom": "Media Freedom",
    "civil-discourse": "Civil Discourse",
    "institutional-integrity": "Institutional Integrity",
}

DOMAINS: Dict[str, Tuple[str, ...]] = {
    "rule-of-law": ("elections", "rule-of-law", "national-security"),
    "operating-economic": (
        "regulatory-stability",
        "trade-policy",
        "government-contracts",
        "fiscal-policy",
    ),
    "societal-institutional": ("media-freedom", "civil-discourse", "institutional-integrity"),
}

DOMAIN_NAMES: Dict[str, str] = {
    "rule-of-law": "Rule of Law & National Security",
    "operating-economic": "Operating & Economic Environment",
    "societal-institutional": "Societal & Institutional Integrity",
}


def validate_partition(category_ids: Tuple[str, ...], domains: Dict[str, Tuple[str, ...]]) -> Dict[str, str]:
    """
    Check that every category belongs to exactly one domain.

    Returns:
        Reverse mapping of category id -> domain id

    Raises:
        TaxonomyError: On duplicates, overlaps, unknown ids, empty domains or gaps
    """
    if len(set(category_ids)) != len(category_ids):
        raise TaxonomyError("Duplicate category ids in taxonomy")

    category_to_domain: Dict[str, str] = {}
    for domain_id, members in domains.items():
        if not members:
            raise TaxonomyError(f"Domain {domain_id!r} has no categories")
        for category_id in members:
            if category_id not in category_ids:
                raise TaxonomyError(f"Domain {domain_id!r} references unknown category {category_id!r}")
            if category_id in category_to_domain:
                raise TaxonomyError(
                    f"Category {category_id!r} assigned to both "
                    f"{category_to_domain[category_id]!r} and {domain_id!r}"
                )
            category_to_domain[category_id] = domain_id

    unassigned = [c for c in category_ids if c not in category_to_domain]
    if unassigned:
        raise TaxonomyError(f"Categories without a domain: {', '.join(unassigned)}")

    return category_to_domain


CATEGORY_DOMAIN: Dict[str, str] = validate_partition(CATEGORY_IDS, DOMAINS)


def require_category(category_id: str) -> str:
    """Return category_id unchanged, or raise UnknownCategoryError"""
    if category_id not in CATEGORY_DOMAIN:
        raise UnknownCategoryError(category_id)
    return category_id


def domain_categories(domain_id: str) -> List[str]:
    """Categories of a domain, in taxonomy order"""
    if domain_id not in DOMAINS:
        raise UnknownDomainError(domain_id)
    return list(DOMAINS[domain_id])
