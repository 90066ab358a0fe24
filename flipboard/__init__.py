from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

allowed_origins = "*"
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

EXTENSION_KEY = 'flipboard'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry and state machine per app; handlers and routes reach
    # them through the app instead of module globals
    from flipboard.services.games import RoomRegistry, RoomStateMachine
    from flipboard.socketio_events import SessionGateway, SocketIOChannel, register_socketio_handlers

    registry = RoomRegistry(code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6))
    timers_enabled = flask_app.config.get('ROUND_TIMER_ENABLED', True)
    machine = RoomStateMachine(
        registry,
        SocketIOChannel(socketio),
        round_duration=flask_app.config.get('ROUND_DURATION_SEC', 30),
        spawn=socketio.start_background_task if timers_enabled else None,
        sleep=socketio.sleep,
    )
    flask_app.extensions[EXTENSION_KEY] = machine

    from flipboard.main import main
    flask_app.register_blueprint(main)

    from flipboard.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    gateway = SessionGateway(machine, default_capacity=flask_app.config.get('DEFAULT_CAPACITY', 2))
    register_socketio_handlers(socketio, gateway)

    return flask_app


def get_state_machine(flask_app):
    return flask_app.extensions[EXTENSION_KEY]


def start_room_sweeper(flask_app):
    """Start the idle-room sweeper as a Socket.IO background task. Returns False when disabled."""
    from flipboard.services.games.state_machine import run_idle_sweeper

    max_idle = int(flask_app.config.get('ROOM_IDLE_TIMEOUT_SEC', 0))
    if max_idle <= 0:
        return False
    interval = int(flask_app.config.get('ROOM_SWEEP_INTERVAL_SEC', 60))
    socketio.start_background_task(run_idle_sweeper, get_state_machine(flask_app), interval, max_idle, socketio.sleep)
    return True
