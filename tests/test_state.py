import threading

import pytest

from vclustermgr.state import (
    ClientRegistry,
    MigrationTracker,
    VaultSetupState,
    VaultStateStore,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


# --- MigrationTracker ---


def test_migration_label_source():
    tracker = MigrationTracker()
    tracker.add("preprod", "source-vc", "target-vc", "myapp")
    assert "target-vc" in tracker.label("preprod", "source-vc", "myapp")


def test_migration_label_target():
    tracker = MigrationTracker()
    tracker.add("preprod", "source-vc", "target-vc", "myapp")
    assert "source-vc" in tracker.label("preprod", "target-vc", "myapp")


def test_migration_label_texts():
    tracker = MigrationTracker()
    tracker.add("preprod", "source-vc", "target-vc", "myapp")
    assert tracker.label("preprod", "source-vc", "myapp") == "Migre vers target-vc"
    assert tracker.label("preprod", "target-vc", "myapp") == "Depuis source-vc"


def test_migration_unknown_app():
    tracker = MigrationTracker()
    tracker.add("preprod", "source-vc", "target-vc", "myapp")
    assert tracker.label("preprod", "source-vc", "other-app") == ""


def test_migration_expiry_removes_entry():
    clock = FakeClock()
    tracker = MigrationTracker(clock=clock)
    tracker.add("preprod", "myvc", "other", "myapp")
    assert len(tracker) == 2
    clock.now += 15 * 60 + 1
    assert tracker.label("preprod", "myvc", "myapp") == ""
    assert len(tracker) == 1


def test_migration_still_valid_before_expiry():
    clock = FakeClock()
    tracker = MigrationTracker(clock=clock)
    tracker.add("preprod", "myvc", "other", "myapp")
    clock.now += 15 * 60 - 1
    assert tracker.label("preprod", "myvc", "myapp") == "Migre vers other"


def test_migration_different_env():
    tracker = MigrationTracker()
    tracker.add("preprod", "source-vc", "target-vc", "myapp")
    assert tracker.label("prod", "source-vc", "myapp") == ""


# --- VaultStateStore ---


def test_vault_state_set_and_get():
    store = VaultStateStore()
    store.set("preprod", "myvc", "done", "")
    vs = store.get("preprod", "myvc")
    assert vs is not None
    assert vs.status == "done"
    assert vs.message == ""


def test_vault_state_error():
    store = VaultStateStore()
    store.set("preprod", "myvc", "error", "vault unreachable")
    vs = store.get("preprod", "myvc")
    assert vs is not None
    assert vs.status == "error"
    assert vs.message == "vault unreachable"


def test_vault_state_unknown():
    store = VaultStateStore()
    assert store.get("preprod", "nonexistent") is None


def test_vault_state_overwrite():
    store = VaultStateStore()
    store.set("preprod", "myvc", "waiting", "")
    store.set("preprod", "myvc", "done", "")
    assert store.get("preprod", "myvc").status == "done"


def test_vault_state_separate_envs():
    store = VaultStateStore()
    store.set("preprod", "myvc", "done", "")
    assert store.get("prod", "myvc") is None


def test_vault_state_concurrent():
    store = VaultStateStore()

    def work():
        store.set("preprod", "myvc", "done", "")
        store.get("preprod", "myvc")

    threads = [threading.Thread(target=work) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.get("preprod", "myvc").status == "done"


@pytest.mark.parametrize(
    "status, expected",
    [("waiting", True), ("configuring", True), ("done", False), ("error", False)],
)
def test_vault_state_in_progress(status, expected):
    assert VaultSetupState(status=status).in_progress is expected


# --- ClientRegistry ---


def test_registry_returns_none_when_empty():
    assert ClientRegistry().for_env("preprod") is None


def test_registry_fallback_to_any():
    registry = ClientRegistry()
    prod_client = object()
    registry.register("prod", prod_client)
    assert registry.for_env("prod") is prod_client
    assert registry.for_env("preprod") is prod_client


def test_registry_per_env_client():
    preprod_client = object()
    prod_client = object()
    registry = ClientRegistry({"preprod": preprod_client, "prod": prod_client})
    assert registry.for_env("preprod") is preprod_client
    assert registry.for_env("prod") is prod_client


def test_registry_register_replaces():
    first, second = object(), object()
    registry = ClientRegistry({"prod": first})
    registry.register("prod", second)
    assert registry.for_env("prod") is second
    assert "prod" in registry
    assert "preprod" not in registry