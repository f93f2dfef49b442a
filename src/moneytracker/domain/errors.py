"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicateTransactionError(ConflictError):
    """A transaction with the same source reference was already ingested."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class NotConfiguredError(DomainError):
    """Mail ingestion is disabled or its credentials are incomplete."""


def user_not_found(user_id: int) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def username_not_found(username: str) -> str:
    """Return message for missing user by username."""
    return f"User '{username}' not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_not_owned(category_id: int, user_id: int) -> str:
    """Return message for a category that belongs to another user."""
    return f"Category {category_id} does not belong to user {user_id}"


def duplicate_category(name: str, user_id: int) -> str:
    """Return message for duplicate category name."""
    return f"Category '{name}' already exists for user {user_id}"


def duplicate_source_reference(source_reference: str, user_id: int) -> str:
    """Return message for an already ingested message."""
    return f"Transaction with source reference '{source_reference}' already exists for user {user_id}"


def category_delete_blocked(category_id: int, transaction_count: int) -> str:
    """Return message when a category still has transactions."""
    return (
        f"Cannot delete category {category_id}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )


def mail_not_enabled() -> str:
    """Return message when mail ingestion is switched off."""
    return "Email parsing is not enabled. Please configure it in settings first."


def mail_credentials_missing() -> str:
    """Return message when mail ingestion lacks host, username or password."""
    return "Email credentials not configured. Please update your settings."
