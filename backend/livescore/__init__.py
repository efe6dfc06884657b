from flask import Flask, jsonify
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

DEMO_TEAMS = [
    ('Computer Science', 'CSE'),
    ('Mechanical', 'MECH'),
    ('Electrical', 'EEE'),
    ('Civil', 'CIVIL'),
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS')

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from livescore.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from livescore.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    from livescore.api.fouls import fouls
    flask_app.register_blueprint(fouls, url_prefix='/api/fouls')

    from livescore.services.scoring.errors import ScoringError

    @flask_app.errorhandler(ScoringError)
    def handle_scoring_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    from livescore.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from livescore.models import User, Team

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Unauthorized', 'message': 'Admin login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = User(username=flask_app.config['ADMIN_USERNAME'])
            admin.set_password(flask_app.config['ADMIN_PASSWORD'])
            db.session.add(admin)
            for name, short_code in DEMO_TEAMS:
                db.session.add(Team(name=name, short_code=short_code))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
