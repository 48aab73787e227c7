"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Transaction input is missing a required field or has a non-numeric amount"""

    pass


class TransportError(DomainException):
    """Transaction API call failed or was rejected by the server"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction data from the server is malformed"""

    pass


class NotFoundError(DomainException):
    """Transaction id is not present in the current snapshot"""

    def __init__(self, transaction_id: object):
        self.transaction_id = transaction_id
        super().__init__("Transaction not found")
