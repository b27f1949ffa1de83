"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class UpstreamUnavailable(AppError):
    """Raised when the market data source cannot be reached or returns garbage."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        super().__init__(
            f"Market data unavailable for {symbol}: {reason}",
            code="UPSTREAM_UNAVAILABLE",
        )


class QuoteUnavailable(AppError):
    """Raised when no usable quote exists, fresh or stale."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No quote available for {symbol}", code="QUOTE_UNAVAILABLE")


class InvalidOrder(AppError):
    """Raised when an order request is malformed."""

    def __init__(self, message: str, code: str = "INVALID_ORDER"):
        super().__init__(message, code=code)


class AccountExists(InvalidOrder):
    """Raised when opening an account whose identifier is already taken."""

    def __init__(self, account_id: str):
        super().__init__(f"Account already exists: {account_id}", code="ACCOUNT_EXISTS")


class AccountNotFound(AppError):
    """Raised when a requested account does not exist."""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}", code="ACCOUNT_NOT_FOUND")


class InsufficientBalance(AppError):
    """Raised when a buy order costs more than the available balance."""

    def __init__(self, requested: str, available: str):
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}",
            code="INSUFFICIENT_BALANCE",
        )


class Unauthenticated(AppError):
    """Raised when a caller's credential cannot be resolved to an account."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")
