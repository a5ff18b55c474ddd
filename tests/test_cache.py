import pytest

from ddlhooks.core.adapters.memory import InMemoryRegistrationStore
from ddlhooks.core.cache import DispatchCache, EventCommandTriggers, TriggerRef, merge_by_name
from ddlhooks.core.errors import CatalogDriftError
from ddlhooks.core.registrations import Registration
from ddlhooks.core.taxonomy import CommandKind, Enabled, Event, ReplicationRole


def _reg(name, tags=None, event=Event.COMMAND_START, enabled=Enabled.ORIGIN_ONLY):
    return Registration(
        name=name,
        event=event,
        callback_id=f"cb_{name}",
        enabled=enabled,
        filter=tuple(tags) if tags else None,
    )


def test_wildcard_and_specific_triggers_merge_by_name():
    store = InMemoryRegistrationStore(
        [
            _reg("b_any"),
            _reg("a_specific", ["CREATE TABLE"]),
            _reg("c_specific", ["CREATE TABLE", "DROP TABLE"]),
            _reg("d_any"),
        ]
    )
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == [
        "cb_a_specific",
        "cb_b_any",
        "cb_c_specific",
        "cb_d_any",
    ]
    assert cache.lookup(Event.COMMAND_START, CommandKind.DROP_TABLE) == [
        "cb_b_any",
        "cb_c_specific",
        "cb_d_any",
    ]


def test_lookup_without_registrations_is_empty():
    store = InMemoryRegistrationStore([_reg("a", ["DROP TABLE"])])
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_VIEW) == []
    assert cache.lookup(Event.COMMAND_END, CommandKind.DROP_TABLE) == []
    assert not cache.triggers(Event.COMMAND_END, CommandKind.DROP_TABLE)


def test_events_are_kept_apart():
    store = InMemoryRegistrationStore(
        [_reg("start"), _reg("end", event=Event.COMMAND_END)]
    )
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_start"]
    assert cache.lookup(Event.COMMAND_END, CommandKind.LOAD) == ["cb_end"]
    assert cache.lookup(Event.SECURITY_CHECK, CommandKind.LOAD) == []


def test_repeated_lookups_do_not_rebuild():
    store = InMemoryRegistrationStore([_reg("a")])
    cache = DispatchCache(store)

    first = cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE)
    second = cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE)

    assert first == second
    assert cache.rebuilds == 1
    assert cache.is_valid


def test_store_changes_invalidate_the_cache():
    store = InMemoryRegistrationStore([_reg("b")])
    cache = DispatchCache(store)
    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb_b"]

    store.insert(_reg("a"))

    assert not cache.is_valid
    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb_a", "cb_b"]
    assert cache.rebuilds == 2


def test_rename_reorders_callbacks():
    store = InMemoryRegistrationStore([_reg("a"), _reg("b")])
    cache = DispatchCache(store)
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_a", "cb_b"]

    reg_id = store.scan_by_event_and_name(Event.COMMAND_START, "a").id
    store.rename(reg_id, "z")

    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_b", "cb_a"]


def test_unsubscribed_cache_needs_explicit_invalidation():
    store = InMemoryRegistrationStore([_reg("a")])
    cache = DispatchCache(store, subscribe=False)
    cache.lookup(Event.COMMAND_START, CommandKind.LOAD)

    store.insert(_reg("b"))
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_a"]

    cache.invalidate()
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_a", "cb_b"]


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        (ReplicationRole.ORIGIN, ["cb_always", "cb_origin"]),
        (ReplicationRole.LOCAL, ["cb_always", "cb_origin"]),
        (ReplicationRole.REPLICA, ["cb_always", "cb_replica"]),
    ],
)
def test_replication_role_filters_registrations(role, expected):
    store = InMemoryRegistrationStore(
        [
            _reg("always", enabled=Enabled.ALWAYS),
            _reg("disabled", enabled=Enabled.DISABLED),
            _reg("origin", enabled=Enabled.ORIGIN_ONLY),
            _reg("replica", enabled=Enabled.REPLICA_ONLY),
        ]
    )
    cache = DispatchCache(store, role=role)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_INDEX) == expected


def test_role_callable_is_read_at_rebuild_time():
    role = [ReplicationRole.ORIGIN]
    store = InMemoryRegistrationStore([_reg("replica", enabled=Enabled.REPLICA_ONLY)])
    cache = DispatchCache(store, role=lambda: role[0])
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == []

    role[0] = ReplicationRole.REPLICA
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == []

    cache.invalidate()
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb_replica"]


def test_unknown_stored_tag_is_catalog_drift():
    store = InMemoryRegistrationStore([_reg("old", ["CREATE WIDGET"])])
    cache = DispatchCache(store)

    with pytest.raises(CatalogDriftError, match='unrecognized command "CREATE WIDGET"'):
        cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE)
    assert not cache.is_valid


def test_drift_in_disabled_registration_is_ignored():
    store = InMemoryRegistrationStore(
        [_reg("old", ["CREATE WIDGET"], enabled=Enabled.DISABLED), _reg("ok")]
    )
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb_ok"]


def test_stored_tags_match_case_insensitively():
    store = InMemoryRegistrationStore([_reg("a", ["create table"])])
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb_a"]


def test_fires_and_fires_for_event():
    store = InMemoryRegistrationStore(
        [_reg("a", ["DROP TABLE"], event=Event.NAME_LOOKUP)]
    )
    cache = DispatchCache(store)

    assert cache.fires(CommandKind.DROP_TABLE)
    assert cache.fires_for_event(Event.NAME_LOOKUP, CommandKind.DROP_TABLE)
    assert not cache.fires_for_event(Event.COMMAND_START, CommandKind.DROP_TABLE)
    assert not cache.fires(CommandKind.CREATE_TABLE)


def test_triggers_keep_buckets_separate():
    store = InMemoryRegistrationStore([_reg("any"), _reg("spec", ["LOAD"])])
    cache = DispatchCache(store)

    found = cache.triggers(Event.COMMAND_START, CommandKind.LOAD)

    assert found.any_triggers == (TriggerRef("any", "cb_any"),)
    assert found.cmd_triggers == (TriggerRef("spec", "cb_spec"),)
    assert found.callbacks == ["cb_any", "cb_spec"]


def test_merge_by_name():
    first = [TriggerRef("a", "1"), TriggerRef("c", "3"), TriggerRef("e", "5")]
    second = [TriggerRef("b", "2"), TriggerRef("d", "4")]

    assert [t.name for t in merge_by_name(first, second)] == ["a", "b", "c", "d", "e"]
    assert merge_by_name([], second) == second
    assert merge_by_name(first, []) == first


def test_merge_by_name_prefers_first_on_ties():
    merged = merge_by_name([TriggerRef("x", "first")], [TriggerRef("x", "second")])

    assert [t.callback_id for t in merged] == ["first", "second"]


def test_empty_event_command_triggers_is_falsy():
    empty = EventCommandTriggers(Event.COMMAND_START, CommandKind.LOAD)

    assert not empty
    assert empty.triggers == []


def test_repeated_tag_spellings_fire_once():
    store = InMemoryRegistrationStore(
        [
            Registration(
                name="a",
                event=Event.COMMAND_START,
                callback_id="cb",
                enabled=Enabled.ALWAYS,
                filter=("CREATE TABLE", "create table"),
            )
        ]
    )
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb"]


def test_empty_filter_fires_on_any_command():
    store = InMemoryRegistrationStore(
        [Registration(name="a", event=Event.COMMAND_START, callback_id="cb", filter=())]
    )
    cache = DispatchCache(store)

    assert cache.lookup(Event.COMMAND_START, CommandKind.CREATE_TABLE) == ["cb"]
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == ["cb"]


def test_close_stops_listening_to_the_store():
    store = InMemoryRegistrationStore()
    cache = DispatchCache(store)
    cache.lookup(Event.COMMAND_START, CommandKind.LOAD)

    cache.close()
    cache.close()
    assert not cache.is_valid

    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == []
    store.insert(_reg("a"))
    assert cache.is_valid
    assert cache.lookup(Event.COMMAND_START, CommandKind.LOAD) == []
