from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from relay import socketio
from relay.services.rooms import Departure, registry
from typing import Any, Dict, Optional
import time


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    departure = registry.disconnect(sid)
    if departure:
        _announce_departure(departure)


def handle_join_game(data):
    data = _payload(data)
    game_uuid = data.get('gameUuid')
    user_id = data.get('userId')
    username = data.get('username')
    if not game_uuid:
        emit('error', {'message': 'gameUuid is required'})
        return
    if not user_id:
        emit('error', {'message': 'userId is required'})
        return
    players_count, previous = registry.join(game_uuid, _get_sid(), user_id)
    if previous:
        # Moving rooms drops the old membership instead of leaving a stale
        # entry behind in the previous room
        leave_room(previous.room_id)
        _announce_departure(previous)
    join_room(game_uuid)
    current_app.logger.info(f"[join] room={game_uuid} user={user_id} name={username} players={players_count}")
    emit('player-joined', {
        'userId': user_id,
        'username': username,
        'playersCount': players_count,
    }, to=game_uuid)


def handle_play_move(data):
    data = _payload(data)
    game_uuid = _require_game_uuid(data)
    if not game_uuid:
        return
    current_app.logger.info(
        f"[move] room={game_uuid} user={data.get('userId')} position={data.get('position')} symbol={data.get('symbol')}"
    )
    emit('move-played', {
        'position': data.get('position'),
        'symbol': data.get('symbol'),
        'userId': data.get('userId'),
        'timestamp': _now_ms(),
    }, to=game_uuid, include_self=False)


def handle_game_update(data):
    data = _payload(data)
    game_uuid = _require_game_uuid(data)
    if not game_uuid:
        return
    current_app.logger.info(f"[update] room={game_uuid}")
    # gameState is relayed as-is, not wrapped
    emit('game-updated', data.get('gameState'), to=game_uuid)


def handle_game_ended(data):
    data = _payload(data)
    game_uuid = _require_game_uuid(data)
    if not game_uuid:
        return
    current_app.logger.info(f"[finish] room={game_uuid} winner={data.get('winner')} draw={data.get('isDraw')}")
    emit('game-finished', {
        'winner': data.get('winner'),
        'isDraw': data.get('isDraw'),
        'timestamp': _now_ms(),
    }, to=game_uuid)


def handle_request_game_state(data):
    data = _payload(data)
    game_uuid = _require_game_uuid(data)
    if not game_uuid:
        return
    current_app.logger.info(f"[state-request] room={game_uuid} sid={_get_sid()}")
    # Peers answer with their own game-update; nothing is collected here
    emit('share-game-state', to=game_uuid, include_self=False)


def handle_leave_game(data):
    data = _payload(data)
    game_uuid = _require_game_uuid(data)
    if not game_uuid:
        return
    leave_room(game_uuid)
    departure = registry.leave(game_uuid, _get_sid())
    user_id = data.get('userId')
    if user_id is None and departure:
        user_id = departure.user_id
    current_app.logger.info(f"[leave] room={game_uuid} user={user_id}")
    if departure and departure.room_deleted:
        current_app.logger.info(f"[room-deleted] room={game_uuid}")
    # Fires even for an emptied room; the broadcast then reaches no one
    emit('player-left', {'userId': user_id}, to=game_uuid)

# ---- helpers ----

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _payload(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}

def _require_game_uuid(data: Dict[str, Any]) -> Optional[str]:
    game_uuid = data.get('gameUuid')
    if not game_uuid:
        emit('error', {'message': 'gameUuid is required'})
        return None
    return game_uuid

def _now_ms() -> int:
    return int(time.time() * 1000)

def _announce_departure(departure: Departure) -> None:
    """Tell the rest of a room that a member is gone, or log its deletion."""
    if departure.room_deleted:
        current_app.logger.info(f"[room-deleted] room={departure.room_id}")
        return
    current_app.logger.info(
        f"[player-left] room={departure.room_id} user={departure.user_id} remaining={departure.remaining}"
    )
    socketio.emit('player-left', {'userId': departure.user_id}, to=departure.room_id, namespace=request.namespace)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the relay's Socket.IO event handlers on one namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join-game', handle_join_game, namespace=namespace)
    socketio.on_event('play-move', handle_play_move, namespace=namespace)
    socketio.on_event('game-update', handle_game_update, namespace=namespace)
    socketio.on_event('game-ended', handle_game_ended, namespace=namespace)
    socketio.on_event('request-game-state', handle_request_game_state, namespace=namespace)
    socketio.on_event('leave-game', handle_leave_game, namespace=namespace)
