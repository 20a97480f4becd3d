from gridduel import db
from gridduel.models import User


class RatingService:
    """Applies rating deltas to persisted users.

    Failures are logged and reported as False; they never propagate to the
    game flow that triggered them.
    """

    def __init__(self, app):
        self.app = app

    def apply_rating_delta(self, user_id: int, delta: int) -> bool:
        with self.app.app_context():
            try:
                user = db.session.get(User, user_id)
                if user is None:
                    self.app.logger.warning(f"[rating-skip] user={user_id} not found")
                    return False
                user.rating = (user.rating or 0) + delta
                user.games_played = (user.games_played or 0) + 1
                db.session.add(user)
                db.session.commit()
                self.app.logger.info(f"[rating] user={user_id} delta={delta} rating={user.rating}")
                return True
            except Exception as exc:
                db.session.rollback()
                self.app.logger.warning(f"[rating-failed] user={user_id} delta={delta} error={exc}")
                return False
