import pytest

from perf_switcher.errors import ReentrantMutationError
from perf_switcher.modules.state_store import ProfileStateStore
from perf_switcher.types import ALL_PROFILES, ErrorKind, ProfileId, SyncState


class TestProfileStateStore:

    def test_initial_state(self, store):
        assert store.current() == SyncState(active_profile=None, catalog=(), last_error=None)

    def test_set_active_notifies(self, store, notifications):
        assert store.set_active(ProfileId.QUIET)

        assert store.current().active_profile is ProfileId.QUIET
        assert [s.active_profile for s in notifications] == [ProfileId.QUIET]

    def test_set_same_active_is_a_noop(self, store, notifications):
        store.set_active(ProfileId.QUIET)
        assert not store.set_active(ProfileId.QUIET)
        assert len(notifications) == 1

    def test_set_active_rejects_unknown_values(self, store, notifications):
        with pytest.raises(ValueError):
            store.set_active("Quiet")
        assert store.current().active_profile is None
        assert notifications == []

    def test_set_catalog(self, store, notifications):
        assert store.set_catalog([ProfileId.QUIET, ProfileId.PERFORMANCE])
        assert store.current().catalog == (ProfileId.QUIET, ProfileId.PERFORMANCE)
        assert not store.set_catalog((ProfileId.QUIET, ProfileId.PERFORMANCE))
        assert len(notifications) == 1

    @pytest.mark.parametrize("catalog", [(), (ProfileId.QUIET, "Turbo"), (1,)])
    def test_set_catalog_rejects_invalid_catalogs(self, store, catalog):
        with pytest.raises(ValueError):
            store.set_catalog(catalog)
        assert store.current().catalog == ()

    def test_set_last_error(self, store, notifications):
        assert store.set_last_error(ErrorKind.TRANSPORT)
        assert not store.set_last_error(ErrorKind.TRANSPORT)
        assert store.set_last_error(None)
        assert [s.last_error for s in notifications] == [ErrorKind.TRANSPORT, None]

    def test_observers_run_in_registration_order(self, store):
        order = []
        store.connect(lambda state: order.append("first"))
        store.connect(lambda state: order.append("second"))
        store.connect(lambda state: order.append("third"))

        store.set_active(ProfileId.BALANCED)

        assert order == ["first", "second", "third"]

    def test_observer_sees_new_state_before_setter_returns(self, store):
        seen = []
        store.connect(lambda state: seen.append(store.current() is state))
        store.set_catalog(ALL_PROFILES)
        assert seen == [True]

    def test_failing_observer_does_not_stop_others(self, store):
        seen = []

        def broken(state):
            raise RuntimeError("observer bug")

        store.connect(broken)
        store.connect(seen.append)
        store.set_active(ProfileId.PERFORMANCE)

        assert len(seen) == 1

    def test_reentrant_mutation_is_refused(self, store):
        errors = []

        def mutating(state):
            try:
                store.set_active(ProfileId.QUIET)
            except ReentrantMutationError as e:
                errors.append(e)

        store.connect(mutating)
        store.set_active(ProfileId.PERFORMANCE)

        assert len(errors) == 1
        assert store.current().active_profile is ProfileId.PERFORMANCE

    def test_store_usable_after_refused_mutation(self, store):
        store.connect(lambda state: store.set_catalog(ALL_PROFILES))
        store.set_active(ProfileId.PERFORMANCE)

        assert store.set_active(ProfileId.QUIET)

    def test_connect_and_disconnect(self, store):
        seen = []
        assert store.connect(seen.append)
        assert not store.connect(seen.append)
        assert store.disconnect(seen.append)
        assert not store.disconnect(seen.append)

        store.set_active(ProfileId.QUIET)
        assert seen == []

    def test_sync_state_is_immutable(self, store):
        store.set_active(ProfileId.QUIET)
        with pytest.raises(AttributeError):
            store.current().active_profile = ProfileId.PERFORMANCE

    def test_new_store_is_independent(self):
        first, second = ProfileStateStore(), ProfileStateStore()
        first.set_active(ProfileId.QUIET)
        assert second.current().active_profile is None
