import pytest

from flipboard.errors import InvalidCapacity, RoomNotFound
from flipboard.models import Phase
from flipboard.services.games import registry as registry_module


def test_create_initializes_forming_room(registry):
    room = registry.create(3, 'sid-a')
    assert room.code in registry
    assert len(room.code) == 6
    assert room.phase == Phase.FORMING
    assert room.players == ['sid-a']
    assert room.clicks == {'sid-a': 0}
    assert room.pending_timer is None
    assert len(room.board) == 36
    assert registry.room_for('sid-a') is room


def test_create_rejects_bad_capacity(registry):
    with pytest.raises(InvalidCapacity):
        registry.create(5, 'sid-a')
    assert len(registry) == 0


def test_get_is_case_insensitive_and_raises_for_unknown(registry):
    room = registry.create(2, 'sid-a')
    assert registry.get(room.code.lower()) is room
    with pytest.raises(RoomNotFound):
        registry.get('NOPE42')
    with pytest.raises(RoomNotFound):
        registry.get(None)


def test_code_collision_is_retried(registry, monkeypatch):
    existing = registry.create(2, 'sid-a')
    codes = iter([existing.code, existing.code, 'FRESH1'])
    monkeypatch.setattr(registry_module, 'generate_room_code', lambda length: next(codes))
    room = registry.create(2, 'sid-b')
    assert room.code == 'FRESH1'
    assert registry.get(existing.code) is existing


def test_code_space_exhaustion_raises(monkeypatch):
    reg = registry_module.RoomRegistry(max_code_attempts=3)
    monkeypatch.setattr(registry_module, 'generate_room_code', lambda length: 'SAME01')
    reg.create(2, 'sid-a')
    with pytest.raises(RuntimeError):
        reg.create(2, 'sid-b')


def test_remove_drops_memberships_and_is_idempotent(registry):
    room = registry.create(2, 'sid-a')
    registry.add_member(room, 'sid-b')
    room.players.append('sid-b')
    assert registry.remove(room.code) is room
    assert registry.room_for('sid-a') is None
    assert registry.room_for('sid-b') is None
    assert registry.remove(room.code) is None


def test_idle_rooms(registry):
    stale = registry.create(2, 'sid-a')
    fresh = registry.create(2, 'sid-b')
    stale.last_activity = 100.0
    fresh.last_activity = 1000.0
    assert registry.idle_rooms(300, now=1100.0) == [stale]
