import os
import sys
import pytest

# Ensure the project root (containing the `flipboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from flipboard import create_app, get_state_machine, socketio
from flipboard.services.games import RoomRegistry, RoomStateMachine


class TestConfig:
    __test__ = False
    TESTING = True
    SECRET_KEY = 'test-secret'
    ROUND_DURATION_SEC = 30
    DEFAULT_CAPACITY = 2
    ROOM_CODE_LENGTH = 6
    ROOM_IDLE_TIMEOUT_SEC = 0
    # Timers are armed but only expire when a test calls RoundTimer.fire()
    ROUND_TIMER_ENABLED = False


class RecordingChannel:
    """Channel double that records what the state machine emits."""

    def __init__(self):
        self.emitted = []
        self.members = {}
        self.closed = []

    def emit(self, event, data, to=None, skip_sid=None):
        self.emitted.append({'event': event, 'data': data, 'to': to, 'skip_sid': skip_sid})

    def enter(self, sid, room):
        self.members.setdefault(room, set()).add(sid)

    def close(self, room):
        self.closed.append(room)
        self.members.pop(room, None)

    def events(self, name=None):
        return [e for e in self.emitted if name is None or e['event'] == name]

    def clear(self):
        self.emitted.clear()


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def machine(registry, channel):
    return RoomStateMachine(registry, channel, round_duration=30)


@pytest.fixture()
def full_room(machine):
    """A two-player room, ready to start."""
    room = machine.create_room('sid-a', 2)
    machine.join(room.code, 'sid-b')
    return room


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def state_machine(flask_app):
    return get_state_machine(flask_app)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    """Factory for connected Socket.IO test clients; all are disconnected on teardown."""
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
