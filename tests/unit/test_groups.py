"""Tests for the group registry."""

from rollout.core.feature_flags.groups import ALL_GROUP, GroupRegistry

from tests.factories import User


class TestGroupRegistry:
    """Tests for GroupRegistry."""

    def test_all_group_builtin(self):
        registry = GroupRegistry()
        assert ALL_GROUP in registry
        assert registry.evaluate("all", User(id=1)) is True
        assert registry.evaluate("all", object()) is True

    def test_define_and_evaluate(self):
        registry = GroupRegistry()
        registry.define("staff", lambda user: user.role == "staff")
        assert registry.evaluate("staff", User(id=1, role="staff")) is True
        assert registry.evaluate("staff", User(id=2)) is False

    def test_unregistered_group_is_false(self):
        assert GroupRegistry().evaluate("nobody", User(id=1)) is False

    def test_redefine_overwrites(self):
        registry = GroupRegistry()
        registry.define("beta", lambda user: False)
        registry.define("beta", lambda user: True)
        assert registry.evaluate("beta", User(id=1)) is True

    def test_result_coerced_to_bool(self):
        registry = GroupRegistry()
        registry.define("named", lambda user: user.email)
        assert registry.evaluate("named", User(id=1, email="a@b.c")) is True
        assert registry.evaluate("named", User(id=1)) is False

    def test_names_are_normalized(self):
        registry = GroupRegistry({1: lambda user: True})
        assert "1" in registry
        assert registry.evaluate(1, User(id=1)) is True

    def test_registries_are_independent(self):
        first = GroupRegistry()
        second = GroupRegistry()
        first.define("staff", lambda user: True)
        assert "staff" not in second
        assert second.names() == ["all"]
        assert len(first) == 2
