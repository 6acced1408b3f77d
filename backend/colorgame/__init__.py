from datetime import date, datetime
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from colorgame.main import main
    flask_app.register_blueprint(main)

    from colorgame.api.daily import daily
    # Daily challenge routes live under /api/daily to match the frontend API client
    flask_app.register_blueprint(daily, url_prefix='/api/daily')

    # Register Socket.IO event handlers
    from colorgame.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from colorgame.models import Account, DailyColor
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed accounts
            for n in range(1, 4):
                db.session.add(Account(id=f'user-{n}', username=f'testuser{n}'))

            # Seed today's color so submissions work out of the box
            db.session.add(DailyColor(date=date.today(), color_name='Cerulean', r=0, g=123, b=167))

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('publish-color')
    @click.argument('day')
    @click.argument('r', type=click.IntRange(0, 255))
    @click.argument('g', type=click.IntRange(0, 255))
    @click.argument('b', type=click.IntRange(0, 255))
    @click.option('--name', default='Unnamed', help='Display name of the color.')
    def publish_color_command(day, r, g, b, name):
        """Publishes the target color for DAY (YYYY-MM-DD)."""
        from colorgame.models import DailyColor
        target_day = datetime.strptime(day, '%Y-%m-%d').date()
        with flask_app.app_context():
            if DailyColor.query.filter_by(date=target_day).first():
                raise click.ClickException(f'A color is already published for {target_day.isoformat()}')
            db.session.add(DailyColor(date=target_day, color_name=name, r=r, g=g, b=b))
            db.session.commit()
            print(f'Published {name} rgb({r},{g},{b}) for {target_day.isoformat()}')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(publish_color_command)

    return flask_app
