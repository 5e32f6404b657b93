"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TaxonomyError(DomainException):
    """Category/domain partition is incomplete or overlapping"""

    pass


class CorruptStateError(DomainException):
    """Persisted assessment data failed structural validation"""

    pass


class UnknownCategoryError(DomainException):
    """Category id is not one of the fixed categories"""

    def __init__(self, category_id: str):
        super().__init__(f"Unknown category: {category_id!r}")
        self.category_id = category_id


class UnknownDomainError(DomainException):
    """Domain id is not one of the fixed domains"""

    def __init__(self, domain_id: str):
        super().__init__(f"Unknown domain: {domain_id!r}")
        self.domain_id = domain_id


class IncompleteScoresError(DomainException):
    """Aggregate requested over a score set with missing categories"""

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing scores for: {', '.join(missing)}")
        self.missing = missing


class StaleAggregatesError(DomainException):
    """Assessment persisted after an edit without recomputing aggregates"""

    pass


class InvalidTrendError(DomainException):
    """Trend is not one of increasing/stable/decreasing"""

    def __init__(self, trend: str):
        super().__init__(f"Invalid trend: {trend!r}")
        self.trend = trend
