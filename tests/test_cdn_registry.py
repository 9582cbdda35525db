"""Tests for CDN provider registries.

Verifies:
- Unknown names raise ProviderNotFoundError (fail-closed)
- Re-registering a name replaces the previous provider
- Single-selection registry keeps at most one active provider
- Unregistering the active provider clears the selection
"""

from __future__ import annotations

import threading

import pytest

from cdnrouter.errors import NoActiveProviderError, ProviderNotFoundError
from cdnrouter.registry import ProviderRegistry, SingleSelectionProviderRegistry


class _StubProvider:
    """Stub provider for registry operations; never called."""

    def __init__(self, label: str = "stub") -> None:
        self.label = label


class TestRegistryFailClosed:
    def test_unknown_name_raises(self) -> None:
        registry = ProviderRegistry()
        with pytest.raises(ProviderNotFoundError) as exc_info:
            registry.get_by_name("nonexistent")
        assert exc_info.value.name == "nonexistent"
        assert "nonexistent" in str(exc_info.value)

    def test_not_found_is_lookup_error(self) -> None:
        registry = ProviderRegistry()
        with pytest.raises(LookupError):
            registry.get_by_name("missing")

    def test_names_are_case_sensitive(self) -> None:
        registry = ProviderRegistry()
        registry.register("S3", _StubProvider())
        with pytest.raises(ProviderNotFoundError):
            registry.get_by_name("s3")

    def test_unregister_unknown_raises(self) -> None:
        registry = ProviderRegistry()
        with pytest.raises(ProviderNotFoundError):
            registry.unregister("ghost")


class TestRegistryHappyPath:
    def test_register_and_resolve_same_instance(self) -> None:
        registry = ProviderRegistry()
        provider = _StubProvider()
        registry.register("primary", provider)
        assert registry.get_by_name("primary") is provider

    def test_reregister_replaces(self) -> None:
        registry = ProviderRegistry()
        first = _StubProvider("first")
        second = _StubProvider("second")
        registry.register("primary", first)
        registry.register("primary", second)
        assert registry.get_by_name("primary") is second
        assert len(registry) == 1

    def test_list_names_in_registration_order(self) -> None:
        registry = ProviderRegistry()
        registry.register("b", _StubProvider())
        registry.register("a", _StubProvider())
        assert registry.list_names() == ["b", "a"]
        assert registry.provider_names == frozenset({"a", "b"})

    def test_contains(self) -> None:
        registry = ProviderRegistry()
        registry.register("x", _StubProvider())
        assert "x" in registry
        assert "y" not in registry

    def test_unregister_returns_provider(self) -> None:
        registry = ProviderRegistry()
        provider = _StubProvider()
        registry.register("x", provider)
        assert registry.unregister("x") is provider
        assert "x" not in registry

    def test_plain_registry_has_no_active_selection(self) -> None:
        assert not hasattr(ProviderRegistry(), "get_active")


class TestSingleSelection:
    def test_no_active_raises(self) -> None:
        registry = SingleSelectionProviderRegistry()
        registry.register("primary", _StubProvider())
        with pytest.raises(NoActiveProviderError):
            registry.get_active()
        assert registry.active_name is None

    def test_set_active_and_get(self) -> None:
        registry = SingleSelectionProviderRegistry()
        provider = _StubProvider()
        registry.register("primary", provider)
        registry.set_active("primary")
        assert registry.get_active() is provider
        assert registry.active_name == "primary"

    def test_set_active_unknown_raises(self) -> None:
        registry = SingleSelectionProviderRegistry()
        with pytest.raises(ProviderNotFoundError):
            registry.set_active("missing")
        assert registry.active_name is None

    def test_set_active_replaces_previous(self) -> None:
        registry = SingleSelectionProviderRegistry()
        a, b = _StubProvider("a"), _StubProvider("b")
        registry.register("a", a)
        registry.register("b", b)
        registry.set_active("a")
        registry.set_active("b")
        assert registry.get_active() is b
        assert registry.active_name == "b"

    def test_reregister_active_name_resolves_new_provider(self) -> None:
        registry = SingleSelectionProviderRegistry()
        registry.register("primary", _StubProvider("old"))
        registry.set_active("primary")
        replacement = _StubProvider("new")
        registry.register("primary", replacement)
        assert registry.get_active() is replacement

    def test_unregister_active_clears_selection(self) -> None:
        registry = SingleSelectionProviderRegistry()
        registry.register("primary", _StubProvider())
        registry.set_active("primary")
        registry.unregister("primary")
        assert registry.active_name is None
        with pytest.raises(NoActiveProviderError):
            registry.get_active()

    def test_unregister_other_keeps_selection(self) -> None:
        registry = SingleSelectionProviderRegistry()
        registry.register("a", _StubProvider())
        registry.register("b", _StubProvider())
        registry.set_active("a")
        registry.unregister("b")
        assert registry.active_name == "a"

    def test_clear_active(self) -> None:
        registry = SingleSelectionProviderRegistry()
        registry.register("a", _StubProvider())
        registry.set_active("a")
        registry.clear_active()
        assert registry.active_name is None
        assert "a" in registry

    def test_concurrent_set_active_leaves_one_registered_active(self) -> None:
        registry = SingleSelectionProviderRegistry()
        names = [f"p{i}" for i in range(8)]
        for name in names:
            registry.register(name, _StubProvider(name))

        errors: list[Exception] = []

        def activate(name: str) -> None:
            try:
                for _ in range(200):
                    registry.set_active(name)
                    if registry.get_active().label not in names:
                        errors.append(AssertionError("unexpected active provider"))
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=activate, args=(n,)) for n in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert registry.active_name in names
        assert registry.get_active() is registry.get_by_name(registry.active_name)
