"""Use case owning categories and subcategories."""

from dataclasses import dataclass, replace

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.use_cases.compensation import CompensatingSequence
from src.application.use_cases.concurrency import OwnerLocks
from src.domain.constants import DEFAULT_CATEGORIES
from src.domain.errors import ConflictError, NotFoundError
from src.domain.models import (
    Category,
    CategoryTree,
    CategoryType,
    SubCategory,
)
from src.domain.policies import ensure_category_deletable
from src.domain.services import parse_category_type, require_name
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import new_identifier


@dataclass(frozen=True)
class RestoreDefaultsResult:
    """Result of a restore_defaults run.

    Attributes:
        categories_created: Default categories that were missing.
        subcategories_created: Default subcategories that were missing.
    """

    categories_created: int
    subcategories_created: int


class CategoryCatalog:
    """Manage the category tree of an owner.

    Entities referenced by transactions are never deleted; deleting an
    unused category removes its subcategories first.
    """

    def __init__(
        self,
        repository: LedgerRepositoryPort,
        logger=None,
        locks: OwnerLocks | None = None,
    ) -> None:
        self._repository = repository
        self._logger = logger or get_app_logger()
        self._locks = locks or OwnerLocks()

    def create_category(
        self,
        owner: str,
        name: str,
        category_type: CategoryType | str,
    ) -> Category:
        """Create a top-level category.

        Raises:
            ValidationError: If the name is blank or the type unknown.
            ConflictError: If the owner already has a category of that name.
        """
        category = Category(
            id=new_identifier(),
            owner=owner,
            name=require_name(name),
            category_type=parse_category_type(category_type),
        )
        with self._locks.hold(owner):
            self._ensure_unique_category(owner, category.name)
            stored = self._repository.insert_category(category)
        self._logger.info(f"Created category {stored.id} for owner={owner}")
        return stored

    def update_category(
        self,
        owner: str,
        category_id: str,
        name: str | None = None,
        category_type: CategoryType | str | None = None,
    ) -> Category:
        """Rename a category or change its type.

        The type of a category used by transactions cannot change, since
        the transactions were validated against it.
        """
        with self._locks.hold(owner):
            current = self._require_category(owner, category_id)
            updated = current
            if name is not None:
                cleaned = require_name(name)
                if cleaned.lower() != current.name.lower():
                    self._ensure_unique_category(owner, cleaned)
                updated = replace(updated, name=cleaned)
            if category_type is not None:
                new_type = parse_category_type(category_type)
                if new_type is not current.category_type:
                    if self._repository.count_category_references(
                        owner,
                        category_id,
                    ):
                        raise ConflictError(
                            f"Category {category_id} is in use; "
                            "its type cannot change",
                            details={"category_id": category_id},
                        )
                updated = replace(updated, category_type=new_type)
            stored = self._repository.update_category(updated)
        self._logger.info(f"Updated category {category_id} for owner={owner}")
        return stored

    def delete_category(self, owner: str, category_id: str) -> None:
        """Delete a category and all of its subcategories.

        Raises:
            NotFoundError: If the category does not exist for the owner.
            ConflictError: If the category or any subcategory is in use.
        """
        with self._locks.hold(owner):
            self._require_category(owner, category_id)
            children = self._repository.list_subcategories(
                owner,
                category_id,
            )
            references = self._repository.count_category_references(
                owner,
                category_id,
            ) + sum(
                self._repository.count_subcategory_references(owner, child.id)
                for child in children
            )
            ensure_category_deletable(category_id, references)

            with CompensatingSequence(
                "delete_category",
                self._logger,
                details={"category_id": category_id},
            ) as sequence:
                for child in children:
                    self._repository.delete_subcategory(owner, child.id)
                    sequence.record(
                        f"restore subcategory {child.id}",
                        lambda child=child: (
                            self._repository.insert_subcategory(child)
                        ),
                    )
                if not self._repository.delete_category(owner, category_id):
                    raise NotFoundError("Category", category_id)
        self._logger.info(
            f"Deleted category {category_id} and {len(children)} "
            f"subcategories for owner={owner}"
        )

    def create_subcategory(
        self,
        owner: str,
        category_id: str,
        name: str,
    ) -> SubCategory:
        """Create a subcategory under a category of the same owner."""
        subcategory = SubCategory(
            id=new_identifier(),
            owner=owner,
            category_id=category_id,
            name=require_name(name),
        )
        with self._locks.hold(owner):
            self._require_category(owner, category_id)
            self._ensure_unique_subcategory(
                owner,
                category_id,
                subcategory.name,
            )
            stored = self._repository.insert_subcategory(subcategory)
        self._logger.info(
            f"Created subcategory {stored.id} under {category_id} "
            f"for owner={owner}"
        )
        return stored

    def update_subcategory(
        self,
        owner: str,
        subcategory_id: str,
        name: str | None = None,
        category_id: str | None = None,
    ) -> SubCategory:
        """Rename a subcategory or move it to another category.

        Subcategories used by transactions cannot move.
        """
        with self._locks.hold(owner):
            current = self._require_subcategory(owner, subcategory_id)
            target_id = category_id or current.category_id
            new_name = require_name(name) if name is not None else current.name
            if target_id != current.category_id:
                self._require_category(owner, target_id)
                if self._repository.count_subcategory_references(
                    owner,
                    subcategory_id,
                ):
                    raise ConflictError(
                        f"SubCategory {subcategory_id} is in use; "
                        "it cannot move to another category",
                        details={"subcategory_id": subcategory_id},
                    )
            if (
                target_id != current.category_id
                or new_name.lower() != current.name.lower()
            ):
                self._ensure_unique_subcategory(owner, target_id, new_name)
            stored = self._repository.update_subcategory(
                replace(current, name=new_name, category_id=target_id)
            )
        self._logger.info(
            f"Updated subcategory {subcategory_id} for owner={owner}"
        )
        return stored

    def delete_subcategory(self, owner: str, subcategory_id: str) -> None:
        """Delete an unused subcategory."""
        with self._locks.hold(owner):
            self._require_subcategory(owner, subcategory_id)
            ensure_category_deletable(
                subcategory_id,
                self._repository.count_subcategory_references(
                    owner,
                    subcategory_id,
                ),
            )
            if not self._repository.delete_subcategory(owner, subcategory_id):
                raise NotFoundError("SubCategory", subcategory_id)
        self._logger.info(
            f"Deleted subcategory {subcategory_id} for owner={owner}"
        )

    def list_categories(self, owner: str) -> list[CategoryTree]:
        """Return categories with their subcategories, ordered by name."""
        with self._locks.hold(owner):
            categories = self._repository.list_categories(owner)
            subcategories = self._repository.list_subcategories(owner)
        children: dict[str, list[SubCategory]] = {}
        for subcategory in subcategories:
            children.setdefault(subcategory.category_id, []).append(
                subcategory
            )
        return [
            CategoryTree(
                category=category,
                subcategories=sorted(
                    children.get(category.id, []),
                    key=lambda child: (child.name.lower(), child.id),
                ),
            )
            for category in sorted(
                categories,
                key=lambda category: (category.name.lower(), category.id),
            )
        ]

    def restore_defaults(self, owner: str) -> RestoreDefaultsResult:
        """Seed the default category tree, creating only what is missing."""
        categories_created = 0
        subcategories_created = 0
        with self._locks.hold(owner):
            existing = {
                tree.category.name.lower(): tree
                for tree in self.list_categories(owner)
            }
            for name, category_type, children in DEFAULT_CATEGORIES:
                tree = existing.get(name.lower())
                if tree is None:
                    category = self._repository.insert_category(
                        Category(
                            id=new_identifier(),
                            owner=owner,
                            name=name,
                            category_type=category_type,
                        )
                    )
                    categories_created += 1
                    present: set[str] = set()
                else:
                    category = tree.category
                    present = {
                        child.name.lower() for child in tree.subcategories
                    }
                for child_name in children:
                    if child_name.lower() in present:
                        continue
                    self._repository.insert_subcategory(
                        SubCategory(
                            id=new_identifier(),
                            owner=owner,
                            category_id=category.id,
                            name=child_name,
                        )
                    )
                    subcategories_created += 1
        self._logger.info(
            f"Restored defaults for owner={owner}: "
            f"{categories_created} categories, "
            f"{subcategories_created} subcategories created"
        )
        return RestoreDefaultsResult(
            categories_created=categories_created,
            subcategories_created=subcategories_created,
        )

    def _require_category(self, owner: str, category_id: str) -> Category:
        category = self._repository.get_category(owner, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _require_subcategory(
        self,
        owner: str,
        subcategory_id: str,
    ) -> SubCategory:
        subcategory = self._repository.get_subcategory(owner, subcategory_id)
        if subcategory is None:
            raise NotFoundError("SubCategory", subcategory_id)
        return subcategory

    def _ensure_unique_category(self, owner: str, name: str) -> None:
        for category in self._repository.list_categories(owner):
            if category.name.lower() == name.lower():
                raise ConflictError(
                    f"Category '{name}' already exists",
                    details={"category_id": category.id},
                )

    def _ensure_unique_subcategory(
        self,
        owner: str,
        category_id: str,
        name: str,
    ) -> None:
        for child in self._repository.list_subcategories(owner, category_id):
            if child.name.lower() == name.lower():
                raise ConflictError(
                    f"SubCategory '{name}' already exists",
                    details={"subcategory_id": child.id},
                )


__all__ = ["CategoryCatalog", "RestoreDefaultsResult"]
