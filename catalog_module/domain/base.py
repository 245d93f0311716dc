"""Base classes for domain layer.

Provides foundational abstractions for entities and value objects.
"""

from abc import ABC
from dataclasses import dataclass


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass
class ValueObject(ABC):
    """Base class for value objects.

    Value objects have no identity of their own and are compared by
    their attributes.

    Example:
        @dataclass
        class CategoryLink(ValueObject):
            catalog_id: str
            category_id: str | None = None
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


@dataclass(eq=False)
class Entity(ABC):
    """Base class for entities.

    Entities have identity that persists across state changes.
    Two entities are equal if they have the same identity,
    regardless of their other attributes. Entities that were not
    persisted yet (id is None) are only equal to themselves.

    Subclasses must be declared with ``@dataclass(eq=False)`` to keep
    identity-based comparison.

    Attributes:
        id: Unique identifier for this entity, assigned on persistence.
    """

    id: str | None = None

    def __eq__(self, other: object) -> bool:
        """Compare entities by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash entity by identity.

        Returns:
            Hash of the entity id.
        """
        if self.id is None:
            return id(self)
        return hash(self.id)

    @property
    def is_transient(self) -> bool:
        """Whether the entity has not been persisted yet."""
        return self.id is None
