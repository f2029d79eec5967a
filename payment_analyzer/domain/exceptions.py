"""Domain-specific exceptions"""

from typing import List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPaymentRulesError(DomainException):
    """Rate table contains a negative rate or bonus"""

    pass


class InvalidEntryDataError(DomainException):
    """Daily record is malformed (unparseable date or non-numeric amount)"""

    pass


class AnalysisValidationError(DomainException):
    """Business-rule validation produced errors that block saving the analysis"""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        super().__init__("; ".join(errors))
        self.errors = errors
        self.warnings = warnings or []


class AnalysisNotFoundError(DomainException):
    """Requested analysis does not exist"""

    pass
