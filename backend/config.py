import os


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {'1', 'true', 'yes', 'on'}


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///leaderboarder.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Replenish timer (seconds). 0 disables.
    CREDIT_INTERVAL_SEC = int(os.environ.get('CREDIT_INTERVAL_SEC', '60'))
    # Extra candidates fetched beyond min_users when ranking a leaderboard
    LEADERBOARD_OVERFETCH = int(os.environ.get('LEADERBOARD_OVERFETCH', '10'))
    DEFAULT_MIN_USERS = int(os.environ.get('DEFAULT_MIN_USERS', '5'))
    # Reject unknown filter keys instead of ignoring them
    STRICT_FILTER_KEYS = _env_bool('STRICT_FILTER_KEYS', False)
    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
        ).split(',')
        if o.strip()
    ]
