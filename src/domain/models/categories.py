"""Domain models for the category catalog."""

from dataclasses import dataclass
from enum import Enum


class CategoryType(str, Enum):
    """Closed set of category kinds."""

    INCOME = "income"
    EXPENSE = "expense"
    DEBT = "debt"

    @classmethod
    def parse(cls, value) -> "CategoryType":
        """Resolve a member from a member, its value, or its name.

        Raises:
            ValueError: If the value does not name a category type.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            cleaned = value.strip().lower()
            for member in cls:
                if cleaned in (member.value, member.name.lower()):
                    return member
        raise ValueError(f"Unknown category type: {value!r}")


@dataclass(frozen=True)
class Category:
    """Top-level category."""

    id: str
    owner: str
    name: str
    category_type: CategoryType


@dataclass(frozen=True)
class SubCategory:
    """Category child; always owned by the owner of its parent."""

    id: str
    owner: str
    category_id: str
    name: str


@dataclass(frozen=True)
class CategoryTree:
    """Category with its subcategories, for listing."""

    category: Category
    subcategories: list[SubCategory]


__all__ = ["CategoryType", "Category", "SubCategory", "CategoryTree"]
