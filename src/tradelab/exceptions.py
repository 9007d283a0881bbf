"""Exception hierarchy shared by the simulation, storage and oracle layers."""

from typing import Any, Dict, Optional


class TradeLabException(Exception):
    """Base exception for TradeLab."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MaterialValidationError(TradeLabException):
    """An uploaded study material with an unsupported type or size."""

    def __init__(self, file_name: str, message: str):
        super().__init__(message, details={"file_name": file_name})
        self.file_name = file_name


class AuthenticationRequiredError(TradeLabException):
    """Raised when a scenario is started without an authenticated user."""

    def __init__(self, operation: str = "start_scenario"):
        super().__init__(
            f"An authenticated user is required for {operation}",
            details={"operation": operation},
        )


class PersistenceError(TradeLabException):
    """A document store read or write failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Document store {operation} failed: {message}",
            details={"operation": operation},
        )
        self.operation = operation


class DocumentNotFoundError(PersistenceError):
    """An update targeted a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__("update", f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


class OracleError(TradeLabException):
    """Base class for failures talking to the text-generation oracle."""


class OracleRequestError(OracleError):
    """The oracle (or the proxy in front of it) returned an error or was unreachable."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.status = status


class OracleResponseError(OracleError):
    """The oracle answered, but without the JSON payload the caller needs."""
