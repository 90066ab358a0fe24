from flask import Blueprint, current_app, jsonify

from flipboard import get_state_machine

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Flip Board game server!'})


@main.route('/health')
def health():
    machine = get_state_machine(current_app)
    return jsonify({'status': 'healthy', 'rooms': len(machine.registry)})
