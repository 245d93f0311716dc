"""Search criteria and paged results.

Criteria objects are plain dataclasses; ``cache_key`` turns them into a
hashable key for the search cache regions.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


def _frozen(values: list[str] | None) -> tuple[str, ...]:
    return tuple(sorted(set(values or [])))


@dataclass
class PagingCriteria:
    """Paging and sorting parameters.

    Attributes:
        skip: Number of results to skip.
        take: Maximum number of results.
        sort_by: Sort field.
        sort_order: Sort order (asc/desc).
    """

    skip: int = 0
    take: int = 20
    sort_by: str = "name"
    sort_order: str = "asc"


@dataclass
class AssociationSearchCriteria(PagingCriteria):
    """Filter parameters for association search.

    Attributes:
        object_ids: Owner product ids.
        associated_object_ids: Associated product or category ids.
        group: Association type (e.g. "Accessories").
        keyword: Substring of the association tags.
    """

    object_ids: list[str] | None = None
    associated_object_ids: list[str] | None = None
    group: str | None = None
    keyword: str | None = None
    sort_by: str = "priority"

    def cache_key(self) -> tuple:
        return (
            "AssociationSearch",
            _frozen(self.object_ids),
            _frozen(self.associated_object_ids),
            self.group,
            self.keyword,
            self.sort_by,
            self.sort_order.lower(),
            self.skip,
            self.take,
        )


@dataclass
class ProductExportDataQuery(PagingCriteria):
    """Query selecting products for search and export.

    Attributes:
        catalog_ids: Products in these catalogs (or linked into them).
        category_ids: Products in these categories (or linked into them).
        object_ids: Restrict to these product ids.
        keyword: Substring of product name or code.
        search_in_variations: Include variations in the result.
        response_group: Parts of each product to load.
    """

    catalog_ids: list[str] | None = None
    category_ids: list[str] | None = None
    object_ids: list[str] | None = None
    keyword: str | None = None
    search_in_variations: bool = False
    response_group: str | None = None


@dataclass
class SearchResult(Generic[T]):
    """Page of search results.

    Attributes:
        total_count: Number of matches across all pages.
        results: Current page.
    """

    total_count: int = 0
    results: list[T] = field(default_factory=list)
