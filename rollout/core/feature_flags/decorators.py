"""Feature flag decorators."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from .client import Rollout

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def feature_flag(
    rollout: Rollout,
    name: str,
    fallback: Optional[Callable[..., Any]] = None,
    user_extractor: Optional[Callable[..., Any]] = None,
) -> Callable[[F], F]:
    """Decorator to gate function execution behind a feature.

    Args:
        rollout: Service used to evaluate the feature
        name: Name of the feature
        fallback: Function to call instead when the feature is inactive
        user_extractor: Function returning the requesting user from the call
            arguments; without one the check is anonymous

    Example:
        @feature_flag(rollout, "new_ui", fallback=render_old_ui,
                      user_extractor=lambda request: request.user)
        def render_new_ui(request):
            ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            user = user_extractor(*args, **kwargs) if user_extractor else None

            if rollout.is_active(name, user):
                return func(*args, **kwargs)
            elif fallback:
                return fallback(*args, **kwargs)
            else:
                logger.debug(f"Feature '{name}' is inactive, skipping {func.__name__}")
                return None

        return wrapper  # type: ignore

    return decorator
