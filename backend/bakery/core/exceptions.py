"""
Errors that are shown to the user as notifications.

Services raise these; the API layer turns them into a notification body.
Not-found and validation errors are dismissable. Conflicts, blocked
deletes and business rule violations are persistent because the user has to
do something (refresh, pick other data) before retrying.
"""

from typing import Any, Optional


class CrudErrorMessage:
    ENTITY_NOT_FOUND = "The selected entity was not found."
    CONCURRENT_UPDATE = (
        "Somebody else might have updated the data. Please refresh and try again."
    )
    OPERATION_PREVENTED_BY_REFERENCES = (
        "The operation can not be executed as there are references to entity "
        "in the database."
    )
    REQUIRED_FIELDS_MISSING = "Please fill out all required fields before proceeding."


class BakeryError(Exception):
    """
    Base class for user-facing errors.

    Attributes:
        message: Text shown to the user
        context: Structured details for logging, never shown to the user
    """

    kind = "error"
    persistent = False
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.context = context


class EntityNotFoundError(BakeryError):
    kind = "not_found"
    default_message = CrudErrorMessage.ENTITY_NOT_FOUND


class DataValidationError(BakeryError):
    """Required field missing or value in the wrong format."""

    kind = "validation"
    default_message = CrudErrorMessage.REQUIRED_FIELDS_MISSING

    def __init__(
        self,
        message: Optional[str] = None,
        fields: Optional[list[str]] = None,
        **context: Any,
    ):
        super().__init__(message, **context)
        self.fields = fields or []


class ConcurrentUpdateError(BakeryError):
    kind = "conflict"
    persistent = True
    default_message = CrudErrorMessage.CONCURRENT_UPDATE


class DataIntegrityError(BakeryError):
    """A database constraint rejected the write."""

    kind = "integrity"
    persistent = True
    default_message = CrudErrorMessage.OPERATION_PREVENTED_BY_REFERENCES


class ReferentialIntegrityError(DataIntegrityError):
    """Other rows still reference the entity."""

    kind = "referential_integrity"


class UserFriendlyDataError(BakeryError):
    """Business rule violation with a message written for the user."""

    kind = "business_rule"
    persistent = True
