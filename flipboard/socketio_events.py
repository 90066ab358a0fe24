from flask import request
from flask_socketio import emit
from typing import Any, Optional
import logging

from flipboard.errors import FlipBoardError
from flipboard.services.games import RoomStateMachine

logger = logging.getLogger(__name__)


class SocketIOChannel:
    """Outbound side of the gateway: what the state machine emits through."""

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, data: Any, to: Optional[str] = None, skip_sid: Optional[str] = None) -> None:
        # Use socketio.emit since this may be called from a background task
        self.socketio.emit(event, data, to=to, skip_sid=skip_sid, namespace=self.namespace)

    def enter(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def close(self, room: str) -> None:
        self.socketio.close_room(room, namespace=self.namespace)


def _room_code(data) -> Optional[str]:
    # Clients send either {'roomCode': 'ABC123'} or the bare code
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        return data.get('roomCode') or data.get('code')
    return None


class SessionGateway:
    """Inbound side: translates Socket.IO events into state machine calls.

    Holds no room state; every handler is parameterized by the room code
    in the payload and the caller's sid.
    """

    def __init__(self, machine: RoomStateMachine, default_capacity: int = 2):
        self.machine = machine
        self.default_capacity = default_capacity

    def _dispatch(self, operation, *args) -> None:
        try:
            operation(*args)
        except FlipBoardError as exc:
            logger.info(f"[rejected] sid={request.sid} op={operation.__name__} code={exc.code} message={exc.message}")
            emit('error', exc.to_dict())

    def handle_connect(self, auth=None):
        logger.info(f"[connect] sid={request.sid}")

    def handle_disconnect(self, reason=None):
        logger.info(f"[disconnect] sid={request.sid} reason={reason}")
        self.machine.leave(request.sid)

    def handle_create_room(self, data=None):
        data = data if isinstance(data, dict) else {}
        capacity = data.get('capacity', data.get('maxPlayers', self.default_capacity))
        self._dispatch(self.machine.create_room, request.sid, capacity)

    def handle_join_room(self, data=None):
        self._dispatch(self.machine.join, _room_code(data), request.sid)

    def handle_start_game(self, data=None):
        self._dispatch(self.machine.start, _room_code(data), request.sid)

    def handle_flip_cell(self, data=None):
        # Late or malformed flips are expected during races; drop them quietly
        if not isinstance(data, dict):
            return
        self.machine.flip(_room_code(data), request.sid, data.get('index'))

    def handle_rematch(self, data=None):
        self._dispatch(self.machine.rematch, _room_code(data), request.sid)


def register_socketio_handlers(socketio, gateway: SessionGateway, namespace: str = '/') -> None:
    """Register Socket.IO event handlers for the gateway on ``namespace``."""
    socketio.on_event('connect', gateway.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', gateway.handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', gateway.handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', gateway.handle_join_room, namespace=namespace)
    socketio.on_event('startGame', gateway.handle_start_game, namespace=namespace)
    socketio.on_event('flipCell', gateway.handle_flip_cell, namespace=namespace)
    socketio.on_event('rematch', gateway.handle_rematch, namespace=namespace)
