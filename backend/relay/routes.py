from flask import Blueprint, jsonify
from relay.services.rooms import registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Tic Tac Toe WebSocket server',
        'activeGames': registry.room_count(),
        'connectedUsers': registry.user_count(),
    })

@main.route('/stats')
def stats():
    return jsonify({
        'activeGames': registry.room_count(),
        'connectedUsers': registry.user_count(),
        'games': registry.snapshot(),
    })

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
