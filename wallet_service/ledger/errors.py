"""
Ledger error taxonomy.
Every business-rule failure has a stable code and an HTTP status.
"""


class LedgerError(Exception):
    """Base class for ledger failures."""

    code = "ledger_error"
    status_code = 400
    retryable = False

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.__class__.__name__)
        self.detail = detail or self.__class__.__name__


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class AmountOutOfRange(LedgerError):
    code = "amount_out_of_range"


class AuthenticationFailed(LedgerError):
    code = "authentication_failed"


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"


class RecipientNotFound(LedgerError):
    code = "recipient_not_found"
    status_code = 404


class SameAccountTransfer(LedgerError):
    code = "same_account_transfer"


class WeakSecret(LedgerError):
    code = "weak_secret"


class RegistrationError(LedgerError):
    code = "registration_invalid"


class AccountNotFound(LedgerError):
    code = "account_not_found"
    status_code = 404


class ConflictError(LedgerError):
    """Concurrent modification; the whole operation may be retried."""

    code = "conflict"
    status_code = 409
    retryable = True


class OperationTimeout(LedgerError):
    """Account lock could not be acquired in time. Nothing was changed."""

    code = "operation_timeout"
    status_code = 503
    retryable = True


class PartialTransferFailure(LedgerError):
    """
    A transfer commit did not complete cleanly and the two accounts may
    disagree. Needs reconciliation, never an automatic retry.
    """

    code = "partial_transfer_failure"
    status_code = 500

    def __init__(self, detail: str, sender_id=None, receiver_id=None):
        super().__init__(detail)
        self.sender_id = sender_id
        self.receiver_id = receiver_id


class LedgerIntegrityError(LedgerError):
    """Stored history does not reproduce the stored balance."""

    code = "ledger_integrity_error"
    status_code = 500
