"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AlertNotFoundError(DomainException):
    """No alert with the given id is held in the recent-alerts list"""

    pass


class AlertAlreadyResolvedError(DomainException):
    """Alert has already reached the resolved state"""

    pass


class InvalidThresholdsError(DomainException):
    """Risk thresholds are out of range or not ordered"""

    pass


class ProfileStorageError(DomainException):
    """Behavior profile could not be read from or written to storage"""

    pass
