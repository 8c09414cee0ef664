"""Data models for units and tiers."""

from dataclasses import dataclass, field

from .constants import TIER_NAME_FORMAT


@dataclass(frozen=True, eq=False)
class Unit:
    """A parsed build unit (one project file).

    Identity is the unit name, compared case-insensitively. ``file_path`` is
    informational only.
    """

    name: str
    file_path: str | None = None
    internal_references: tuple[str, ...] = ()
    external_references: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the unit stays immutable
        object.__setattr__(self, "internal_references", tuple(self.internal_references))
        object.__setattr__(self, "external_references", tuple(self.external_references))

    @property
    def key(self) -> str:
        return self.name.casefold()

    def __hash__(self) -> int:
        return hash(self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Unit):
            return NotImplemented
        return self.key == other.key

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Tier:
    """One cleanup step: units that share no dependency among themselves."""

    index: int
    units: tuple[Unit, ...] = field(default=(), compare=False)

    @property
    def name(self) -> str:
        return TIER_NAME_FORMAT.format(index=self.index)

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self):
        return iter(self.units)

    def __str__(self) -> str:
        return self.name
