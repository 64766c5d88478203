"""Environment diffing.

Computes which variables a hook added or changed by comparing the snapshot
taken after the hook ran against the one taken before it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from hook_wrapper.core.constants import LAST_HOOK_EXIT_STATUS_VAR
from hook_wrapper.core.snapshot import EnvironmentSnapshot

logger = logging.getLogger(__name__)


@dataclass
class EnvironmentDiff:
    """Variables added or changed between two snapshots.

    Variables that were removed are not represented.

    Attributes:
        changes: Variable name -> new value.
    """

    changes: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.changes)

    def __getitem__(self, name: str) -> str:
        return self.changes[name]

    def __contains__(self, name: object) -> bool:
        return name in self.changes

    def __repr__(self) -> str:
        return f"EnvironmentDiff(names={self.names()})"

    @property
    def is_empty(self) -> bool:
        """Whether the hook changed nothing."""
        return not self.changes

    def names(self) -> list[str]:
        """Sorted names of changed variables."""
        return sorted(self.changes)

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary."""
        return dict(self.changes)

    def summary(self) -> str:
        """Get a brief summary listing changed names (never values)."""
        if self.is_empty:
            return "EnvironmentDiff: no changes"
        return f"EnvironmentDiff: {len(self)} changed ({', '.join(self.names())})"


def diff_snapshots(after: Mapping[str, str], before: Mapping[str, str]) -> EnvironmentDiff:
    """Compute variables added or changed between two snapshots.

    A name from ``after`` is included when it is missing from ``before`` or
    its value differs by exact string comparison. The wrapper's exit status
    variable is always excluded, under the snapshot's name case rule.

    Args:
        after: Snapshot taken after the hook ran.
        before: Snapshot taken before the hook ran.

    Returns:
        EnvironmentDiff of added and changed variables.
    """
    changes: dict[str, str] = {}
    fold_case = isinstance(after, EnvironmentSnapshot) and not after.case_sensitive
    sentinel = LAST_HOOK_EXIT_STATUS_VAR.upper() if fold_case else LAST_HOOK_EXIT_STATUS_VAR

    for name, value in after.items():
        if (name.upper() if fold_case else name) == sentinel:
            continue
        if name not in before or before[name] != value:
            changes[name] = value

    diff = EnvironmentDiff(changes=changes)
    logger.debug(diff.summary())
    return diff
