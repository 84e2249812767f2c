"""Feature record: rollout state for one feature and its wire encoding.

Wire format (no escaping)::

    <percentage>|<user ids csv>|<group names csv>|<organization ids csv>

Older encodings stored a data payload in the 4th field. Only its empty
placeholder ``{}`` is still accepted.
"""

from __future__ import annotations

import re
from collections.abc import MutableSet
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Union,
)

from rollout.core.errors import UnsupportedLegacyFormat
from rollout.core.feature_flags.bucketing import is_in_bucket
from rollout.core.feature_flags.groups import normalize_group

FIELD_SEPARATOR = "|"
LIST_SEPARATOR = ","
LEGACY_EMPTY_DATA = "{}"

_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?")

IdExtractor = Union[str, Callable[[Any], Any]]


class OrderedSet(MutableSet):
    """Deduplicated container that iterates in insertion order."""

    def __init__(self, items: Iterable[str] = ()):
        self._items: Dict[str, None] = dict.fromkeys(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: str) -> None:
        self._items[item] = None

    def discard(self, item: str) -> None:
        self._items.pop(item, None)

    def to_list(self) -> List[str]:
        return list(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({self.to_list()!r})"


@dataclass(frozen=True)
class FeatureOptions:
    """Evaluation options shared by every record of a Rollout.

    ``id_user_by`` is either an attribute name (called when it is a method)
    or a callable receiving the user. ``use_sets`` is accepted for
    compatibility; membership always uses :class:`OrderedSet`.
    """

    id_user_by: IdExtractor = "id"
    randomize_percentage: bool = False
    use_sets: bool = False

    @classmethod
    def coerce(
        cls, value: Union["FeatureOptions", Mapping[str, Any], None]
    ) -> "FeatureOptions":
        if value is None:
            return cls()
        if isinstance(value, FeatureOptions):
            return value
        return cls(**dict(value))


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item for item in raw.split(LIST_SEPARATOR) if item]


def _parse_percentage(raw: Optional[str]) -> float:
    """Leading numeric prefix of ``raw``; 0.0 when there is none."""
    match = _NUMERIC_PREFIX.match(raw or "")
    if match is None:
        return 0.0
    return float(match.group(0))


class Feature:
    """Rollout state of a single named feature."""

    def __init__(
        self,
        name: str,
        encoded: Optional[str] = None,
        options: Union[FeatureOptions, Mapping[str, Any], None] = None,
    ):
        self._name = str(name)
        self._options = FeatureOptions.coerce(options)
        self.percentage: Union[int, float] = 0
        self.users = OrderedSet()
        self.groups = OrderedSet()
        self.organizations = OrderedSet()

        if encoded is not None:
            self._load(encoded)

    @classmethod
    def decode(
        cls,
        name: str,
        encoded: str,
        options: Union[FeatureOptions, Mapping[str, Any], None] = None,
    ) -> "Feature":
        return cls(name, encoded, options)

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> FeatureOptions:
        return self._options

    def _load(self, encoded: str) -> None:
        fields = encoded.split(FIELD_SEPARATOR, 3)
        fields += [""] * (4 - len(fields))
        raw_percentage, raw_users, raw_groups, raw_orgs = fields

        if raw_orgs.strip() in ("", LEGACY_EMPTY_DATA):
            raw_orgs = ""
        elif raw_orgs.lstrip().startswith("{"):
            raise UnsupportedLegacyFormat(self._name, raw_orgs)

        self.percentage = _parse_percentage(raw_percentage)
        self.users = OrderedSet(_split_list(raw_users))
        self.groups = OrderedSet(normalize_group(g) for g in _split_list(raw_groups))
        self.organizations = OrderedSet(_split_list(raw_orgs))

    def encode(self) -> str:
        return FIELD_SEPARATOR.join(
            [
                str(self.percentage),
                LIST_SEPARATOR.join(self.users),
                LIST_SEPARATOR.join(self.groups),
                LIST_SEPARATOR.join(self.organizations),
            ]
        )

    serialize = encode

    # Mutations

    def add_user(self, user: Any) -> None:
        self.users.add(self.identify(user))

    def remove_user(self, user: Any) -> None:
        self.users.discard(self.identify(user))

    def add_group(self, group: Any) -> None:
        self.groups.add(normalize_group(group))

    def remove_group(self, group: Any) -> None:
        self.groups.discard(normalize_group(group))

    def add_organization(self, organization: Any) -> None:
        self.organizations.add(self.identify(organization))

    def remove_organization(self, organization: Any) -> None:
        self.organizations.discard(self.identify(organization))

    def clear(self) -> None:
        """Fully deactivate: no percentage, users, groups or organizations."""
        self.percentage = 0
        self.users = OrderedSet()
        self.groups = OrderedSet()
        self.organizations = OrderedSet()

    # Evaluation

    def is_active(self, groups: Any, user: Any = None) -> bool:
        """Evaluate the feature for ``user``.

        Anonymous checks (``user is None``) only honour a full rollout.
        ``groups`` is the registry used to resolve group predicates; any
        object exposing ``evaluate(name, user)`` works.
        """
        if user is None:
            return self.percentage == 100

        user_id = self.identify(user)
        return (
            self._user_in_percentage(user_id)
            or user_id in self.users
            or self._user_in_active_organization(user)
            or self._user_in_active_group(user, groups)
        )

    def user_in_active_users(self, user: Any) -> bool:
        """Explicit user list only; ignores percentage, groups and organizations."""
        if user is None:
            return False
        return self.identify(user) in self.users

    def identify(self, user: Any) -> str:
        """Resolve a user (or organization) to its string identifier."""
        if isinstance(user, (int, str)):
            return str(user)

        extractor = self._options.id_user_by
        if callable(extractor):
            value = extractor(user)
        else:
            value = getattr(user, extractor)
            if callable(value):
                value = value()
        return str(value)

    def _user_in_percentage(self, user_id: str) -> bool:
        salt = self._name if self._options.randomize_percentage else None
        return is_in_bucket(user_id, self.percentage, salt)

    def _user_in_active_organization(self, user: Any) -> bool:
        if not self.organizations:
            return False
        organizations = getattr(user, "organizations", None) or ()
        return any(self.identify(org) in self.organizations for org in organizations)

    def _user_in_active_group(self, user: Any, groups: Any) -> bool:
        if groups is None:
            return False
        return any(groups.evaluate(group, user) for group in self.groups)

    # Introspection

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "groups": self.groups.to_list(),
            "users": self.users.to_list(),
            "organizations": self.organizations.to_list(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        return (
            self._name == other._name
            and self.percentage == other.percentage
            and set(self.users) == set(other.users)
            and set(self.groups) == set(other.groups)
            and set(self.organizations) == set(other.organizations)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Feature(name={self._name!r}, percentage={self.percentage!r})"


__all__ = ["Feature", "FeatureOptions", "OrderedSet", "IdExtractor"]
