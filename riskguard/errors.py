"""Precondition failures raised before the decision engine runs."""


class RiskGuardError(Exception):
    """Base class for errors raised by the transaction service."""


class InvalidRequest(RiskGuardError):
    """The transfer payload is malformed (amount, recipient, destination)."""


class AccountNotFound(RiskGuardError):
    """A referenced account does not exist."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account '{account_id}' not found")
        self.account_id = account_id
