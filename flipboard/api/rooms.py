from flask import Blueprint, current_app, jsonify

from flipboard import get_state_machine
from flipboard.errors import RoomNotFound

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    machine = get_state_machine(current_app)
    try:
        room = machine.registry.get(room_code)
    except RoomNotFound as exc:
        return jsonify({'error': exc.message, 'code': exc.code}), 404
    with room.lock:
        payload = room.to_dict()
    # Include the round length so clients can show countdowns
    payload['duration'] = machine.round_duration
    return jsonify(payload)
