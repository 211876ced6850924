"""Tests for SessionRegistry."""

import pytest
from booknav.sessions import SessionRegistry


class TestSessionRegistry:
    """Tests for SessionRegistry."""

    def test__new_session__is_empty(self) -> None:
        registry = SessionRegistry()

        session_id = registry.new_session()

        assert session_id in registry
        storage = registry.get(session_id)
        assert storage is not None
        assert len(storage) == 0

    def test__get_or_create__reuses_known_session(self) -> None:
        registry = SessionRegistry()
        session_id, storage = registry.get_or_create(None)
        storage.set_item("sidebar-scroll", "5")

        same_id, same_storage = registry.get_or_create(session_id)

        assert same_id == session_id
        assert same_storage.get_item("sidebar-scroll") == "5"

    def test__get_or_create__unknown_id__creates_new_session(self) -> None:
        registry = SessionRegistry()

        session_id, _ = registry.get_or_create("forged")

        assert session_id != "forged"
        assert "forged" not in registry
        assert len(registry) == 1

    def test__get__none__returns_none(self) -> None:
        assert SessionRegistry().get(None) is None

    def test__discard__forgets_session(self) -> None:
        registry = SessionRegistry()
        session_id = registry.new_session()

        registry.discard(session_id)
        registry.discard("unknown")

        assert session_id not in registry
        assert len(registry) == 0

    def test__full_registry__evicts_oldest_session(self) -> None:
        registry = SessionRegistry(max_sessions=2)
        first = registry.new_session()
        second = registry.new_session()

        third = registry.new_session()

        assert len(registry) == 2
        assert first not in registry
        assert second in registry
        assert third in registry

    def test__invalid_max_sessions__raises(self) -> None:
        with pytest.raises(ValueError, match="max_sessions"):
            SessionRegistry(max_sessions=0)
