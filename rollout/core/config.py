"""Runtime settings for the rollout core."""

from typing import TYPE_CHECKING, Optional

from pydantic_settings import BaseSettings

if TYPE_CHECKING:
    from rollout.core.feature_flags.feature import FeatureOptions


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Storage backend (memory|redis)
    ROLLOUT_BACKEND: str = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Evaluation options applied to every feature record
    ROLLOUT_ID_USER_BY: str = "id"
    ROLLOUT_RANDOMIZE_PERCENTAGE: bool = False
    ROLLOUT_USE_SETS: bool = False

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def feature_options(self) -> "FeatureOptions":
        from rollout.core.feature_flags.feature import FeatureOptions

        return FeatureOptions(
            id_user_by=self.ROLLOUT_ID_USER_BY,
            randomize_percentage=self.ROLLOUT_RANDOMIZE_PERCENTAGE,
            use_sets=self.ROLLOUT_USE_SETS,
        )


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    global _settings_cache
    _settings_cache = None
