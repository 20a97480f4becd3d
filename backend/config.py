import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = int(os.environ.get('JWT_ACCESS_TOKEN_EXPIRES', str(24 * 3600)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///gridduel.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list of browser origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',') if o.strip()]
    # Rating points moved from loser to winner on a decisive game
    RATING_DELTA = int(os.environ.get('RATING_DELTA', '25'))
    # Chat messages are truncated to this many characters
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '250'))
    GAME_ID_LENGTH = int(os.environ.get('GAME_ID_LENGTH', '6'))
