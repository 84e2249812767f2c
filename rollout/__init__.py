"""Rollout: percentage, user, organization and group based feature flags.

Typical use::

    from rollout import InMemoryFeatureStore, Rollout

    rollout = Rollout(InMemoryFeatureStore())
    rollout.activate_percentage("new_ui", 25)
    rollout.is_active("new_ui", user)
"""

from rollout.core.feature_flags import (
    Feature,
    FeatureOptions,
    FeatureStore,
    GroupRegistry,
    InMemoryFeatureStore,
    RedisFeatureStore,
    Rollout,
    UnsupportedLegacyFormat,
    feature_flag,
    get_rollout,
)

__version__ = "0.1.0"

__all__ = [
    "Feature",
    "FeatureOptions",
    "FeatureStore",
    "GroupRegistry",
    "InMemoryFeatureStore",
    "RedisFeatureStore",
    "Rollout",
    "UnsupportedLegacyFormat",
    "feature_flag",
    "get_rollout",
]
