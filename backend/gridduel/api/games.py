from flask import Blueprint, jsonify, current_app

games = Blueprint('games', __name__)


def _hub():
    return current_app.extensions['game_hub']


@games.route('/', methods=['GET'])
def list_open_games():
    """Sessions still waiting for a second player."""
    return jsonify(_hub().open_games())


@games.route('/<string:game_id>', methods=['GET'])
def get_game_state(game_id):
    state = _hub().snapshot(game_id)
    if state is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(state)
