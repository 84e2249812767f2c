"""Feature flags.

Provides feature activation with:
- Percentage rollouts (CRC32 bucketing)
- Explicit user and organization lists
- Named group predicates
- Pluggable key-value storage (in-memory, Redis)
"""

from rollout.core.errors import UnsupportedLegacyFormat
from rollout.core.feature_flags.bucketing import is_in_bucket
from rollout.core.feature_flags.client import (
    FEATURES_KEY,
    Rollout,
    feature_key,
    get_rollout,
    reset_rollout,
)
from rollout.core.feature_flags.decorators import feature_flag
from rollout.core.feature_flags.feature import Feature, FeatureOptions, OrderedSet
from rollout.core.feature_flags.groups import GroupRegistry
from rollout.core.feature_flags.store import (
    FeatureStore,
    InMemoryFeatureStore,
    RedisFeatureStore,
)

__all__ = [
    "FEATURES_KEY",
    "Feature",
    "FeatureOptions",
    "FeatureStore",
    "GroupRegistry",
    "InMemoryFeatureStore",
    "OrderedSet",
    "RedisFeatureStore",
    "Rollout",
    "UnsupportedLegacyFormat",
    "feature_flag",
    "feature_key",
    "get_rollout",
    "is_in_bucket",
    "reset_rollout",
]
