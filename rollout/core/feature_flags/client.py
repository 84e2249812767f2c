"""Rollout service.

Loads feature records from a key-value store, applies mutations, writes
them back and answers activation queries.

Every mutation is an unprotected read-modify-write: the feature key and the
index key are written separately, and two concurrent writers race with the
last write winning. Callers that need stronger guarantees must serialize
calls or use a store with its own atomic update.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from rollout.core.config import Settings, get_settings
from rollout.core.errors import ConfigurationError, UnsupportedLegacyFormat
from rollout.core.feature_flags.feature import Feature, FeatureOptions
from rollout.core.feature_flags.groups import GroupPredicate, GroupRegistry
from rollout.core.feature_flags.store import (
    FeatureStore,
    InMemoryFeatureStore,
    RedisFeatureStore,
)
from rollout.utils.metrics import (
    rollout_decode_errors_total,
    rollout_evaluations_total,
    rollout_mutations_total,
)

logger = logging.getLogger(__name__)

KEY_PREFIX = "feature:"
FEATURES_KEY = "feature:__features__"


def feature_key(name: Any) -> str:
    return f"{KEY_PREFIX}{name}"


class Rollout:
    """Feature flag service backed by a key-value store."""

    def __init__(
        self,
        store: Any,
        options: Union[FeatureOptions, Mapping[str, Any], None] = None,
        groups: Optional[GroupRegistry] = None,
    ):
        """Initialize the service.

        Args:
            store: Object with ``get``/``set``/``mget``/``delete`` over strings
            options: Evaluation options passed to every feature record
            groups: Group registry; a fresh one (with ``all``) by default
        """
        self.store = store
        self.options = FeatureOptions.coerce(options)
        self.groups = groups if groups is not None else GroupRegistry()

    # Reads

    def get(self, name: Any) -> Feature:
        """Load a feature; missing features come back cleared."""
        name = str(name)
        return self._build(name, self.store.get(feature_key(name)))

    def multi_get(self, *names: Any) -> List[Feature]:
        """Load several features with a single ``mget``, preserving order."""
        if len(names) == 1 and isinstance(names[0], (list, tuple)):
            names = tuple(names[0])
        names = tuple(str(name) for name in names)
        if not names:
            return []
        values = self.store.mget([feature_key(name) for name in names])
        return [self._build(name, value) for name, value in zip(names, values)]

    def features(self) -> List[str]:
        """Names of all known features, in first-activation order."""
        raw = self.store.get(FEATURES_KEY)
        if not raw:
            return []
        return [name for name in raw.split(",") if name]

    list_features = features

    def clear(self) -> None:
        """Alias of :meth:`clear_all`."""
        self.clear_all()

    def is_active(self, name: Any, user: Any = None) -> bool:
        active = self.get(name).is_active(self.groups, user)
        rollout_evaluations_total.labels(result="active" if active else "inactive").inc()
        return active

    def is_inactive(self, name: Any, user: Any = None) -> bool:
        return not self.is_active(name, user)

    def user_in_active_users(self, name: Any, user: Any = None) -> bool:
        """True only if the user is on the feature's explicit user list."""
        return self.get(name).user_in_active_users(user)

    def feature_states(self, user: Any = None) -> Dict[str, bool]:
        return {
            feature.name: feature.is_active(self.groups, user)
            for feature in self.multi_get(*self.features())
        }

    def active_features(self, user: Any = None) -> List[str]:
        return [name for name, active in self.feature_states(user).items() if active]

    # Groups

    def define_group(
        self, name: Any, predicate: Optional[GroupPredicate] = None
    ) -> Any:
        """Register a group predicate.

        Can also be used as a decorator::

            @rollout.define_group("staff")
            def is_staff(user):
                return user.role == "staff"
        """
        if predicate is None:

            def decorator(func: GroupPredicate) -> GroupPredicate:
                self.groups.define(name, func)
                return func

            return decorator

        self.groups.define(name, predicate)
        return predicate

    def active_in_group(self, group: Any, user: Any) -> bool:
        return self.groups.evaluate(group, user)

    # Mutations

    def activate(self, name: Any) -> None:
        with self._edit(name, "activate") as feature:
            feature.percentage = 100

    def deactivate(self, name: Any) -> None:
        with self._edit(name, "deactivate") as feature:
            feature.clear()

    def set(self, name: Any, desired_state: bool) -> None:
        if desired_state:
            self.activate(name)
        else:
            self.deactivate(name)

    def activate_group(self, name: Any, group: Any) -> None:
        with self._edit(name, "activate_group") as feature:
            feature.add_group(group)

    def deactivate_group(self, name: Any, group: Any) -> None:
        with self._edit(name, "deactivate_group") as feature:
            feature.remove_group(group)

    def activate_user(self, name: Any, user: Any) -> None:
        with self._edit(name, "activate_user") as feature:
            feature.add_user(user)

    def deactivate_user(self, name: Any, user: Any) -> None:
        with self._edit(name, "deactivate_user") as feature:
            feature.remove_user(user)

    def activate_users(self, name: Any, users: Iterable[Any]) -> None:
        with self._edit(name, "activate_users") as feature:
            for user in users:
                feature.add_user(user)

    def deactivate_users(self, name: Any, users: Iterable[Any]) -> None:
        with self._edit(name, "deactivate_users") as feature:
            for user in users:
                feature.remove_user(user)

    def activate_organization(self, name: Any, organization: Any) -> None:
        with self._edit(name, "activate_organization") as feature:
            feature.add_organization(organization)

    def deactivate_organization(self, name: Any, organization: Any) -> None:
        with self._edit(name, "deactivate_organization") as feature:
            feature.remove_organization(organization)

    def activate_percentage(self, name: Any, percentage: Union[int, float]) -> None:
        with self._edit(name, "activate_percentage") as feature:
            feature.percentage = percentage

    def deactivate_percentage(self, name: Any) -> None:
        with self._edit(name, "deactivate_percentage") as feature:
            feature.percentage = 0

    def delete(self, name: Any) -> None:
        """Drop a feature from the index and remove its stored record."""
        name = str(name)
        names = [n for n in self.features() if n != name]
        self.store.set(FEATURES_KEY, ",".join(names))
        self.store.delete(feature_key(name))
        rollout_mutations_total.labels(operation="delete").inc()
        logger.info(
            f"Feature deleted: {name}",
            extra={"feature": name, "operation": "delete"},
        )

    def clear_all(self) -> None:
        """Clear every known feature, then remove the index key."""
        for name in self.features():
            with self._edit(name, "clear") as feature:
                feature.clear()
        self.store.delete(FEATURES_KEY)

    # Internals

    def _build(self, name: str, encoded: Optional[str]) -> Feature:
        try:
            return Feature(name, encoded, self.options)
        except UnsupportedLegacyFormat:
            rollout_decode_errors_total.inc()
            logger.error(
                f"Failed to decode feature '{name}': legacy data payload",
                extra={"feature": name, "key": feature_key(name)},
            )
            raise

    @contextmanager
    def _edit(self, name: Any, operation: str) -> Iterator[Feature]:
        feature = self.get(name)
        yield feature
        self._save(feature)
        rollout_mutations_total.labels(operation=operation).inc()
        logger.info(
            f"Feature '{feature.name}' updated: {operation}",
            extra={
                "feature": feature.name,
                "operation": operation,
                "percentage": feature.percentage,
            },
        )

    def _save(self, feature: Feature) -> None:
        self.store.set(feature_key(feature.name), feature.encode())
        names = self.features()
        if feature.name not in names:
            names.append(feature.name)
        self.store.set(FEATURES_KEY, ",".join(names))


def create_store(settings: Settings) -> FeatureStore:
    backend = settings.ROLLOUT_BACKEND.lower()
    if backend == "memory":
        return InMemoryFeatureStore()
    if backend == "redis":
        return RedisFeatureStore.from_url(settings.REDIS_URL)
    raise ConfigurationError(f"Unknown rollout backend: {settings.ROLLOUT_BACKEND}")


# Global service instance
_rollout: Optional[Rollout] = None


def get_rollout() -> Rollout:
    """Get the process-wide Rollout built from settings."""
    global _rollout
    if _rollout is None:
        settings = get_settings()
        _rollout = Rollout(create_store(settings), options=settings.feature_options())
        logger.info(f"Rollout initialized with {settings.ROLLOUT_BACKEND} backend")
    return _rollout


def reset_rollout() -> None:
    global _rollout
    _rollout = None


__all__ = [
    "FEATURES_KEY",
    "KEY_PREFIX",
    "Rollout",
    "create_store",
    "feature_key",
    "get_rollout",
    "reset_rollout",
]
