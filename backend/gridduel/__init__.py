from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
jwt = JWTManager()
socketio = SocketIO(async_mode=None)


def build_game_hub(flask_app):
    """Wire the in-memory session components for one application."""
    from gridduel.services.games import GameHub, SessionStore
    from gridduel.services.games.ratings import RatingService
    from gridduel.services.realtime import Broadcaster, ConnectionRegistry, DisconnectCoordinator

    cfg = flask_app.config
    store = SessionStore(id_length=int(cfg.get('GAME_ID_LENGTH', 6)))
    registry = ConnectionRegistry()
    broadcaster = Broadcaster(registry, logger=flask_app.logger)
    coordinator = DisconnectCoordinator(store, registry, broadcaster, logger=flask_app.logger)
    # In tests run rating writes inline for determinism
    spawn = None if cfg.get('TESTING') else socketio.start_background_task
    return GameHub(
        store,
        registry,
        broadcaster,
        coordinator,
        ratings=RatingService(flask_app),
        rating_delta=int(cfg.get('RATING_DELTA', 25)),
        chat_max_length=int(cfg.get('CHAT_MAX_LENGTH', 250)),
        spawn=spawn,
        logger=flask_app.logger,
    )


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    jwt.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    flask_app.extensions['game_hub'] = build_game_hub(flask_app)

    # Import and register blueprints here
    from gridduel.main import main
    flask_app.register_blueprint(main)

    from gridduel.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Register Socket.IO event handlers
    from gridduel.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Flask-Login user loader
    from gridduel.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
