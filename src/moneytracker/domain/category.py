"""Category domain service."""

from typing import Optional

import structlog

from moneytracker.config import settings
from moneytracker.database.base import Database
from moneytracker.domain.entities import Category as CategoryEntity
from moneytracker.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_delete_blocked,
    category_not_found,
    duplicate_category,
    user_not_found,
)

logger = structlog.get_logger()

EMAIL_ORIGIN = "email parsing"
CSV_ORIGIN = "CSV import"


class CategoryService:
    """Service for managing a user's categories."""

    def __init__(self, db: Database, default_color: Optional[str] = None):
        """Initialize category service.

        Args:
            db: Database instance
            default_color: Color for auto-created categories
                (defaults to settings.default_category_color)
        """
        self.db = db
        self.default_color = default_color or settings.default_category_color

    def create_category(
        self,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        icon_name: Optional[str] = None,
        color_code: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            user_id: Owning user ID
            name: Category name, unique per user
            description: Optional description
            icon_name: Optional icon name
            color_code: Optional color (e.g., "#667eea")

        Returns:
            Category ID

        Raises:
            ValidationError: If name is blank
            NotFoundError: If user doesn't exist
            ConflictError: If the user already has a category with this name
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))
        if self.db.get_category_by_name(user_id, name) is not None:
            raise ConflictError(duplicate_category(name, user_id))

        return self.db.create_category(
            user_id=user_id,
            name=name,
            description=description,
            icon_name=icon_name,
            color_code=color_code or self.default_color,
        )

    def resolve_category(
        self, user_id: int, name: str, origin: str = EMAIL_ORIGIN
    ) -> CategoryEntity:
        """Find a user's category by name, creating it if absent.

        Safe to call concurrently for the same (user, name): when the store
        reports a uniqueness conflict on create, the category another caller
        just created is fetched and returned.

        Args:
            user_id: Owning user ID
            name: Category name
            origin: What triggered the creation, recorded in the description

        Returns:
            Category entity

        Raises:
            ValidationError: If name is blank
            ConflictError: If the conflict persists but the category cannot be read back
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")

        existing = self.db.get_category_by_name(user_id, name)
        if existing is not None:
            return existing

        try:
            category_id = self.db.create_category(
                user_id=user_id,
                name=name,
                description=f"Auto-created from {origin}",
                color_code=self.default_color,
            )
        except ConflictError:
            existing = self.db.get_category_by_name(user_id, name)
            if existing is None:
                raise
            logger.info("category_created_concurrently", user_id=user_id, category=name)
            return existing

        logger.info("category_auto_created", user_id=user_id, category=name, origin=origin)
        return self.db.get_category(category_id)

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def get_category_by_name(self, user_id: int, name: str) -> Optional[CategoryEntity]:
        """Get a user's category by name."""
        return self.db.get_category_by_name(user_id, name)

    def require_category_by_name(self, user_id: int, name: str) -> CategoryEntity:
        """Get a user's category by name or raise NotFoundError."""
        category = self.db.get_category_by_name(user_id, name)
        if category is None:
            raise NotFoundError(f"Category '{name}' not found")
        return category

    def list_categories(self, user_id: int) -> list[CategoryEntity]:
        """List a user's categories.

        Args:
            user_id: Owning user ID

        Returns:
            List of category entities ordered by name
        """
        return self.db.list_categories(user_id)

    def delete_category(self, user_id: int, category_id: int) -> None:
        """Delete one of a user's categories.

        Raises:
            NotFoundError: If the category doesn't exist or belongs to someone else
            DependencyError: If transactions still reference it
        """
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(category_not_found(category_id))

        transaction_count = self.db.get_category_transaction_count(category_id)
        if transaction_count > 0:
            raise DependencyError(category_delete_blocked(category_id, transaction_count))

        self.db.delete_category(category_id)
