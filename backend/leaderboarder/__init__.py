from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from leaderboarder.middleware import register_middleware
    register_middleware(flask_app)

    from leaderboarder.main import main
    flask_app.register_blueprint(main)

    from leaderboarder.api.credits import credits
    flask_app.register_blueprint(credits, url_prefix='/credits')

    from leaderboarder.api.leaderboards import leaderboards
    flask_app.register_blueprint(leaderboards, url_prefix='/leaderboards')

    from leaderboarder.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from leaderboarder.models import Account
    from leaderboarder.services.accounts import resolve_token, touch_last_active

    # Bearer tokens are the only credential; no login_user session cookie
    @login_manager.request_loader
    def load_user_from_request(request):
        header = request.headers.get('Authorization', '')
        token = header.split(' ')[-1].strip() if header else ''
        if not token:
            return None
        account_id = resolve_token(token)
        if account_id is None:
            return None
        touch_last_active(account_id)
        return db.session.get(Account, account_id)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from leaderboarder.services.accounts import create_account
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed accounts
            seeds = [
                ('alice', 'north', 'f', '18-24'),
                ('bob', 'north', 'm', '25-34'),
                ('cara', 'south', 'f', '25-34'),
            ]
            for username, geography, sex, age_group in seeds:
                create_account(username, 'password', geography=geography, sex=sex,
                               age_group=age_group, credits=3)
            print('Database has been reset and seeded!')

    @click.command('replenish-credits')
    def replenish_credits_command():
        """Runs a single credit replenishment tick."""
        from leaderboarder.services.scheduler import replenish_tick
        updated = replenish_tick(flask_app)
        print(f'Replenished credits for {updated} accounts.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(replenish_credits_command)

    return flask_app
