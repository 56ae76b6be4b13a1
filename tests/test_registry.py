"""
Connection registry tests.
"""

import pytest

from tasktrack.notify import ConnectionRegistry


def test_connections_grouped_by_user(registry: ConnectionRegistry, make_connection):
    first = make_connection("alice")
    second = make_connection("alice")
    other = make_connection("bob")

    assert {c.connection_id for c in registry.connections_for("alice")} == {
        first.connection_id,
        second.connection_id,
    }
    assert registry.connections_for("bob") == [other]
    assert registry.connection_count() == 3
    assert len(registry.all_connections()) == 3


def test_unknown_user_has_no_connections(registry: ConnectionRegistry):
    assert registry.connections_for("nobody") == []


def test_unregister_keeps_empty_group(registry: ConnectionRegistry, make_connection):
    connection = make_connection("alice")

    registry.unregister("alice", connection)
    # Unregistering twice is harmless
    registry.unregister("alice", connection)
    registry.unregister("nobody", connection)

    assert registry.connections_for("alice") == []
    assert registry.user_ids() == ["alice"]
    assert registry.connection_count() == 0


@pytest.mark.asyncio
async def test_close_shuts_every_connection(registry: ConnectionRegistry, make_connection):
    first = make_connection("alice")
    second = make_connection("bob")

    await registry.close()

    assert first.closed_with == 1001
    assert second.closed_with == 1001
    assert registry.closed
    assert registry.connection_count() == 0

    with pytest.raises(RuntimeError):
        make_connection("carol")
