from gridduel.services.games import session as session_module
from gridduel.services.games.board import Variant
from gridduel.services.games.session import Phase, SessionStore


def test_create_seats_creator_in_waiting_phase():
    store = SessionStore()
    session = store.create(Variant.CONNECT_THREE, 1)
    assert session.phase == Phase.WAITING
    assert session.board == [None] * 9
    assert session.players == {'X': 1, 'O': None}
    assert session.turn == 'X'
    assert store.get(session.id) is session
    assert len(session.id) == 6


def test_connect_four_session_uses_colours():
    session = SessionStore().create(Variant.CONNECT_FOUR, 7)
    assert session.players == {'red': 7, 'yellow': None}
    assert len(session.board) == 42


def test_game_code_regenerates_on_collision(monkeypatch):
    codes = iter(['aaaaaa', 'aaaaaa', 'bbbbbb'])
    monkeypatch.setattr(session_module.random, 'choices', lambda alphabet, k: list(next(codes)))
    store = SessionStore()
    first = store.create(Variant.CONNECT_THREE, 1)
    second = store.create(Variant.CONNECT_THREE, 2)
    assert first.id == 'aaaaaa'
    assert second.id == 'bbbbbb'


def test_find_by_player_and_remove():
    store = SessionStore()
    session = store.create(Variant.CONNECT_THREE, 1)
    session.players['O'] = 2
    assert store.find_by_player(2) is session
    assert store.find_by_player(3) is None
    assert store.remove(session.id) is session
    assert store.get(session.id) is None
    assert store.remove(session.id) is None


def test_get_ignores_non_string_ids():
    store = SessionStore()
    assert store.get(None) is None
    assert store.get(['x']) is None


def test_waiting_lists_only_open_sessions():
    store = SessionStore()
    open_one = store.create(Variant.CONNECT_THREE, 1)
    busy = store.create(Variant.CONNECT_FOUR, 2)
    busy.phase = Phase.PLAYING
    assert store.waiting() == [open_one]


def test_start_round_alternates_starter():
    session = SessionStore().create(Variant.CONNECT_THREE, 1)
    session.players['O'] = 2
    original = session.starter
    session.board[0] = 'X'
    session.phase = Phase.FINISHED
    session.winner = 'X'
    session.rematch_votes.update({1, 2})

    session.start_round()
    assert session.starter != original
    assert session.turn == session.starter
    assert session.board == [None] * 9
    assert session.phase == Phase.PLAYING
    assert session.winner is None and session.winning_line is None
    assert session.rematch_votes == set()

    session.start_round()
    assert session.starter == original
    assert session.turn == original


def test_to_dict_shape():
    session = SessionStore().create(Variant.CONNECT_FOUR, 1)
    data = session.to_dict()
    assert data['id'] == session.id
    assert data['gameType'] == 'connect4'
    assert data['status'] == 'waiting'
    assert data['players'] == {'red': 1, 'yellow': None}
    assert data['currentTurn'] == 'red'
    assert data['winner'] is None
    assert data['winningLine'] is None
    assert (data['rows'], data['cols']) == (6, 7)
