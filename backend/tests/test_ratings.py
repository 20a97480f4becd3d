from gridduel import db
from gridduel.models import User
from gridduel.services.games.ratings import RatingService


def test_apply_rating_delta_updates_user(flask_app, make_user):
    user = make_user('alice')
    service = RatingService(flask_app)

    assert service.apply_rating_delta(user.id, 25)
    assert service.apply_rating_delta(user.id, -10)

    db.session.expire_all()
    fresh = db.session.get(User, user.id)
    assert fresh.rating == 1015
    assert fresh.games_played == 2


def test_unknown_user_is_reported_not_raised(flask_app):
    assert RatingService(flask_app).apply_rating_delta(9999, 25) is False


def test_store_failure_is_logged_not_raised(flask_app, make_user, monkeypatch):
    user = make_user('bob')

    def _boom():
        raise RuntimeError('database is locked')

    monkeypatch.setattr(db.session, 'commit', _boom)
    assert RatingService(flask_app).apply_rating_delta(user.id, 25) is False
