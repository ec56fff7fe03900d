"""Named aspect ratios and the catalog that holds them."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from mbar_cli.core.constants import DEFAULT_RATIOS, RATIO_PRECISION

_QUANTUM = Decimal(1).scaleb(-RATIO_PRECISION)

Number = Union[int, float, str, Decimal]


class InvalidDimension(ValueError):
    """Raised when an aspect ratio is built from a non-positive dimension."""


def round_ratio(value: Number) -> Decimal:
    """Round to the stored precision, half away from zero."""
    try:
        decimal_value = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    return decimal_value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)


def ratio_of(width: int, height: int) -> Decimal:
    """Exact width/height quotient rounded to the stored precision."""
    return (Decimal(width) / Decimal(height)).quantize(_QUANTUM, rounding=ROUND_HALF_UP)


def ratio_key(value: Decimal) -> str:
    """String form of a ratio as it prints as a number (1.600 -> "1.6", 1.000 -> "1")."""
    text = format(value.normalize(), "f")
    return text if text != "-0" else "0"


def _check_dimension(label: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDimension(f"Invalid {label}: {value!r}")
    if value <= 0:
        raise InvalidDimension(f"Invalid {label}: {value}")
    return value


@dataclass(frozen=True)
class AspectRatio:
    """A width:height pair with an optional display name."""

    width: int
    height: int
    name: str = ""

    def __post_init__(self) -> None:
        _check_dimension("width", self.width)
        _check_dimension("height", self.height)
        object.__setattr__(self, "name", (self.name or "").strip())

    @property
    def ratio(self) -> Decimal:
        return ratio_of(self.width, self.height)

    @property
    def key(self) -> str:
        return ratio_key(self.ratio)

    @property
    def label(self) -> str:
        dims = f"{self.width}:{self.height}"
        return f"{self.name} ({dims})" if self.name else dims

    def __str__(self) -> str:
        return self.label

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height, "name": self.name}


class RatioCatalog:
    """Ordered collection of aspect ratios keyed by their decimal ratio.

    Lookups go through the ratio key; iteration follows insertion order so
    the filter control lists ratios the way an administrator entered them.
    Adding a ratio whose key already exists replaces the earlier entry in its
    original position.
    """

    def __init__(self, ratios: Optional[List[AspectRatio]] = None) -> None:
        self._entries: Dict[str, AspectRatio] = {}
        for ratio in ratios or []:
            self._entries[ratio.key] = ratio

    @classmethod
    def defaults(cls) -> "RatioCatalog":
        catalog = cls()
        for width, height, name in DEFAULT_RATIOS:
            catalog.add(width, height, name)
        return catalog

    @classmethod
    def from_option(cls, option: Optional[Mapping[str, Any]]) -> "RatioCatalog":
        """Rebuild a catalog from its persisted {key: {width, height, name}} form."""
        catalog = cls()
        if not option:
            return catalog
        if not isinstance(option, Mapping):
            raise InvalidDimension(f"Aspect ratio catalog must be a table, got {type(option).__name__}")

        for key, entry in option.items():
            if not isinstance(entry, Mapping):
                raise InvalidDimension(f"Aspect ratio {key!r} must be a table")
            catalog.add(entry.get("width"), entry.get("height"), str(entry.get("name") or ""))
        return catalog

    def to_option(self) -> Dict[str, Dict[str, Any]]:
        return {key: ratio.to_dict() for key, ratio in self._entries.items()}

    def add(self, width: int, height: int, name: str = "") -> AspectRatio:
        ratio = AspectRatio(width=width, height=height, name=name)
        self._entries[ratio.key] = ratio
        return ratio

    def remove(self, key: str) -> AspectRatio:
        try:
            return self._entries.pop(key)
        except KeyError:
            raise KeyError(f"Unknown aspect ratio: {key}") from None

    def get(self, key: str) -> Optional[AspectRatio]:
        return self._entries.get(key)

    def match(self, value: Optional[Number]) -> Optional[AspectRatio]:
        """Return the named ratio equal to a measured value, if any."""
        if value is None:
            return None
        try:
            key = ratio_key(round_ratio(value))
        except ValueError:
            return None
        return self._entries.get(key)

    def list(self) -> List[AspectRatio]:
        return list(self._entries.values())

    def keys(self) -> List[str]:
        return list(self._entries)

    @staticmethod
    def label(ratio: AspectRatio) -> str:
        return ratio.label

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[AspectRatio]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
