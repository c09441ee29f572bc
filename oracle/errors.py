from enum import Enum


class ErrorKind(str, Enum):
    PARSE = "parse"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    COLLABORATOR = "collaborator"
    NOT_FOUND = "not_found"


class OracleError(Exception):
    """Base exception for Oracle domain errors."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, usage: str | None = None):
        super().__init__(message)
        self.message = message
        self.usage = usage


class AuthorizationError(OracleError):
    """Raised when the actor's role lacks the capability a command needs."""

    kind = ErrorKind.AUTHORIZATION


class ValidationError(OracleError):
    """Raised when a recognized command has missing or malformed arguments."""

    kind = ErrorKind.VALIDATION


class NotFoundError(OracleError):
    """Raised when a referenced user or team does not exist."""

    kind = ErrorKind.NOT_FOUND


class CollaboratorError(OracleError):
    """Raised when an external collaborator (store, inference, transport) fails."""

    kind = ErrorKind.COLLABORATOR


class StoreError(CollaboratorError):
    pass


class InferenceError(CollaboratorError):
    pass


class MigrationError(StoreError):
    """Raised when a database migration fails."""
