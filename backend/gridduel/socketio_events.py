import json
import uuid

from flask import current_app, request
from flask_socketio import ConnectionRefusedError, emit

from gridduel import socketio
from gridduel.services.auth import verify_credential
from gridduel.services.games import SessionError, Variant
from gridduel.services.realtime import SocketHandle

NAMESPACE = '/ws'


def _hub():
    return current_app.extensions['game_hub']


def _emit_error(message: str) -> None:
    emit('error', {'type': 'error', 'message': message})


def _current_connection():
    conn = _hub().connection_for(request.sid)
    if conn is None:
        _emit_error('Not connected')
    return conn


def _game_id(data):
    game_id = data.get('gameId') if isinstance(data, dict) else None
    return game_id if isinstance(game_id, str) and game_id else None


def handle_connect(auth=None):
    token = None
    if isinstance(auth, dict):
        token = auth.get('token')
    if not token:
        token = request.args.get('token')
    user_id = verify_credential(token)
    if user_id is None:
        current_app.logger.warning(f"[auth-error] sid={request.sid}")
        raise ConnectionRefusedError({'type': 'auth_error', 'message': 'Authentication failed'})

    client_id = uuid.uuid4().hex
    _hub().connect(client_id, user_id, SocketHandle(socketio, request.sid, request.namespace or NAMESPACE))
    emit('connected', {'type': 'connected', 'clientId': client_id})


def handle_disconnect(reason=None):
    conn = _hub().connection_for(request.sid)
    if conn is None:
        return
    _hub().disconnect(conn.client_id)


def handle_create_game(data=None):
    data = data or {}
    if not isinstance(data, dict):
        _emit_error('Invalid message')
        return
    variant = Variant.parse(data.get('gameType'))
    if variant is None:
        _emit_error('Unknown game type')
        return
    conn = _current_connection()
    if conn is None:
        return
    try:
        _hub().create_session(conn.client_id, variant)
    except SessionError as exc:
        _emit_error(exc.message)


def handle_join_game(data=None):
    game_id = _game_id(data)
    if not game_id:
        _emit_error('gameId is required')
        return
    conn = _current_connection()
    if conn is None:
        return
    try:
        _hub().join_session(conn.client_id, game_id)
    except SessionError as exc:
        _emit_error(exc.message)


def handle_make_move(data=None):
    game_id = _game_id(data)
    conn = _hub().connection_for(request.sid)
    if game_id is None or conn is None:
        return
    _hub().make_move(conn.client_id, game_id, data)


def handle_request_replay(data=None):
    game_id = _game_id(data)
    conn = _hub().connection_for(request.sid)
    if game_id is None or conn is None:
        return
    _hub().request_rematch(conn.client_id, game_id)


def handle_send_message(data=None):
    game_id = _game_id(data)
    conn = _hub().connection_for(request.sid)
    if game_id is None or conn is None:
        return
    _hub().send_chat(conn.client_id, game_id, data.get('message'))


HANDLERS = {
    'create_game': handle_create_game,
    'join_game': handle_join_game,
    'make_move': handle_make_move,
    'request_replay': handle_request_replay,
    'send_message': handle_send_message,
}


def handle_message(data=None):
    """Route a raw ``{type: ...}`` frame, given as JSON text or a dict."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            _emit_error('Invalid message')
            return
    if not isinstance(data, dict):
        _emit_error('Invalid message')
        return
    handler = HANDLERS.get(data.get('type'))
    if handler is None:
        current_app.logger.info(f"[ws-unknown] sid={request.sid} type={data.get('type')!r}")
        _emit_error('Unknown message type')
        return
    handler(data)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    for event, handler in HANDLERS.items():
        socketio.on_event(event, handler, namespace=NAMESPACE)
