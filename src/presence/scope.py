from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from presence.staff import Collaborator


def _frozen(values: Optional[Iterable[str]]) -> frozenset[str]:
    return frozenset(v for v in (values or ()) if v)


@dataclass(frozen=True)
class ScopeFilter:
    """Operator selection. An empty dimension means "everything"."""

    branches: frozenset[str] = frozenset()
    sectors: frozenset[str] = frozenset()
    roles: frozenset[str] = frozenset()
    shifts: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        for name in ("branches", "sectors", "roles", "shifts"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @classmethod
    def of(
        cls,
        branches: Optional[Iterable[str]] = None,
        sectors: Optional[Iterable[str]] = None,
        roles: Optional[Iterable[str]] = None,
        shifts: Optional[Iterable[str]] = None,
    ) -> "ScopeFilter":
        return cls(
            _frozen(branches), _frozen(sectors), _frozen(roles), _frozen(shifts)
        )

    def matches(self, c: Collaborator) -> bool:
        if self.branches and c.branch not in self.branches:
            return False
        if self.sectors and (not c.sector or c.sector not in self.sectors):
            return False
        if self.roles and c.role not in self.roles:
            return False
        if self.shifts and c.shift_label not in self.shifts:
            return False
        return True


ALL = ScopeFilter()


@dataclass(frozen=True)
class Visibility:
    """
    What the acting operator may see, derived from their access rights.

    Restricted sector visibility hides collaborators without a sector.
    """

    allowed_sectors: frozenset[str] = frozenset()
    allowed_branches: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_sectors", _frozen(self.allowed_sectors))
        object.__setattr__(self, "allowed_branches", _frozen(self.allowed_branches))

    def allows(self, c: Collaborator) -> bool:
        if self.allowed_sectors and (
            not c.sector or c.sector not in self.allowed_sectors
        ):
            return False
        if self.allowed_branches and c.branch not in self.allowed_branches:
            return False
        return True


UNRESTRICTED = Visibility()


def filter_population(
    collaborators: Iterable[Collaborator],
    scope: ScopeFilter = ALL,
    visibility: Visibility = UNRESTRICTED,
    include_inactive: bool = False,
) -> list[Collaborator]:
    return [
        c
        for c in collaborators
        if (include_inactive or c.is_active)
        and visibility.allows(c)
        and scope.matches(c)
    ]
