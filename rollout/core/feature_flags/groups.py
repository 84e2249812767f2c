"""Named user predicates used for cohort-based activation."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

GroupPredicate = Callable[[Any], bool]

ALL_GROUP = "all"


def normalize_group(name: Any) -> str:
    """Group names are compared as plain strings."""
    return str(name)


class GroupRegistry:
    """Mapping of group name to predicate, owned by a single Rollout.

    The builtin ``all`` group matches every user. Registrations live only
    as long as the registry; they are never persisted.
    """

    def __init__(self, predicates: Optional[Dict[str, GroupPredicate]] = None):
        self._predicates: Dict[str, GroupPredicate] = {ALL_GROUP: lambda user: True}
        for name, predicate in (predicates or {}).items():
            self.define(name, predicate)

    def define(self, name: Any, predicate: GroupPredicate) -> None:
        """Register or overwrite the predicate for ``name``."""
        group = normalize_group(name)
        if group in self._predicates:
            logger.debug(f"Redefining group: {group}")
        self._predicates[group] = predicate

    def evaluate(self, name: Any, user: Any) -> bool:
        """Unregistered groups never match."""
        predicate = self._predicates.get(normalize_group(name))
        if predicate is None:
            return False
        return bool(predicate(user))

    def names(self) -> List[str]:
        return list(self._predicates)

    def __contains__(self, name: Any) -> bool:
        return normalize_group(name) in self._predicates

    def __len__(self) -> int:
        return len(self._predicates)

    def __repr__(self) -> str:
        return f"GroupRegistry(groups={self.names()})"


__all__ = ["ALL_GROUP", "GroupPredicate", "GroupRegistry", "normalize_group"]
