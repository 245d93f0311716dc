"""Item response groups.

A response group selects which parts of a product are loaded. The
string form is a comma-separated list of PascalCase names, for example
"ItemInfo,ItemAssets,Seo".
"""

from enum import Flag

from catalog_module.domain.exceptions import InvalidResponseGroupError


class ItemResponseGroup(Flag):
    """Parts of a product to load."""

    NONE = 0
    ITEM_INFO = 1
    ITEM_ASSETS = 1 << 1
    ITEM_PROPERTIES = 1 << 2
    ITEM_ASSOCIATIONS = 1 << 3
    ITEM_EDITORIAL_REVIEWS = 1 << 4
    VARIATIONS = 1 << 5
    SEO = 1 << 6
    LINKS = 1 << 7
    INVENTORY = 1 << 8
    OUTLINES = 1 << 9
    REFERENCED_ASSOCIATIONS = 1 << 10

    ITEM_SMALL = ITEM_INFO | ITEM_ASSETS | SEO | OUTLINES
    ITEM_MEDIUM = ITEM_SMALL | ITEM_PROPERTIES | ITEM_EDITORIAL_REVIEWS
    ITEM_LARGE = ITEM_MEDIUM | ITEM_ASSOCIATIONS | VARIATIONS | LINKS | INVENTORY

    @staticmethod
    def _key(name: str) -> str:
        return name.replace("_", "").lower()

    @classmethod
    def parse(
        cls,
        value: "str | int | ItemResponseGroup | None",
        default: "ItemResponseGroup | None" = None,
    ) -> "ItemResponseGroup":
        """Parse a response group.

        Args:
            value: Comma-separated names ("ItemInfo,Seo"), an int, a flag or None.
            default: Returned for None or blank input (ITEM_LARGE when omitted).

        Returns:
            The combined flag.

        Raises:
            InvalidResponseGroupError: If a name does not match any flag.
        """
        if default is None:
            default = cls.ITEM_LARGE
        if value is None:
            return default
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as e:
                raise InvalidResponseGroupError(str(value), [str(value)]) from e

        names = [part.strip() for part in value.split(",") if part.strip()]
        if not names:
            return default

        by_key = {cls._key(name): member for name, member in cls.__members__.items()}
        result = cls.NONE
        unknown = []
        for name in names:
            member = by_key.get(cls._key(name))
            if member is None:
                unknown.append(name)
            else:
                result |= member

        if unknown:
            raise InvalidResponseGroupError(value, unknown)
        return result

    def flags(self) -> list["ItemResponseGroup"]:
        """Return the single-bit flags contained in this group."""
        return [
            member
            for member in type(self).__members__.values()
            if member.value and member.value & (member.value - 1) == 0 and member in self
        ]

    def __str__(self) -> str:
        parts = [
            "".join(word.capitalize() for word in member.name.split("_"))
            for member in self.flags()
        ]
        return ",".join(parts) or "None"
