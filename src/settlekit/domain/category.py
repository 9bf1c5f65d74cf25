"""Category domain service."""

from typing import Optional
from settlekit.database.base import Database
from settlekit.domain.entities import Category as CategoryEntity, CategoryType
from settlekit.domain.errors import ConflictError, NotFoundError, ValidationError


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, type: CategoryType = CategoryType.EXPENSE) -> int:
        """Create a category.

        Args:
            name: Category name
            type: Category type

        Returns:
            Category ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If a category with the same name and type exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required")
        type = CategoryType(type)
        if self.get_category_by_name(name, type) is not None:
            raise ConflictError(f"Category '{name}' ({type.value}) already exists")
        return self.db.create_category(name=name, type=type.value)

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_name(
        self, name: str, type: Optional[CategoryType] = None
    ) -> Optional[CategoryEntity]:
        """Get category by name, optionally restricted to one type."""
        for cat in self.list_categories(type):
            if cat.name == name:
                return cat
        return None

    def require_category_by_name(
        self, name: str, type: Optional[CategoryType] = None
    ) -> CategoryEntity:
        """Get category by name or raise NotFoundError."""
        category = self.get_category_by_name(name, type)
        if category is None:
            raise NotFoundError(f"Category '{name}' not found")
        return category

    def list_categories(self, type: Optional[CategoryType] = None) -> list[CategoryEntity]:
        """List categories.

        Args:
            type: Optional category type to filter by

        Returns:
            List of category entities
        """
        return self.db.list_categories(type=CategoryType(type).value if type is not None else None)
