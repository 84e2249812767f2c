import os
import pytest

from rollout.core.config import reset_settings
from rollout.core.feature_flags import InMemoryFeatureStore, Rollout, reset_rollout


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "LOG_LEVEL",
    "LOG_JSON",
    "ROLLOUT_BACKEND",
    "REDIS_URL",
    "ROLLOUT_ID_USER_BY",
    "ROLLOUT_RANDOMIZE_PERCENTAGE",
    "ROLLOUT_USE_SETS",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def rollout_isolation():
    """Drop cached settings and the global Rollout between tests."""
    reset_settings()
    reset_rollout()
    try:
        yield
    finally:
        reset_settings()
        reset_rollout()


@pytest.fixture
def store():
    return InMemoryFeatureStore()


@pytest.fixture
def rollout(store):
    return Rollout(store)
