from gridduel import db, bcrypt
from flask_login import UserMixin

DEFAULT_RATING = 1000


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    rating = db.Column(db.Integer, nullable=False, default=DEFAULT_RATING)
    games_played = db.Column(db.Integer, nullable=False, default=0)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'rating': self.rating,
            'games_played': self.games_played,
        }
