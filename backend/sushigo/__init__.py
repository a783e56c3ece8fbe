from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from sushigo.services.sushi import MatchRegistry, RoundAdvanceScheduler
from sushigo.services.sushi.scheduler import run_inline

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config, registry=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Match state lives in this process only; each app owns its registry
    flask_app.extensions['match_registry'] = registry if registry is not None else MatchRegistry(
        max_players=int(flask_app.config.get('MAX_PLAYERS', 4))
    )
    delay = float(flask_app.config.get('ROUND_END_DELAY_SEC', 5))
    if flask_app.config.get('TESTING'):
        # Round advances run synchronously in tests for deterministic event order
        scheduler = RoundAdvanceScheduler(delay, start_task=run_inline)
    else:
        scheduler = RoundAdvanceScheduler(delay, start_task=socketio.start_background_task, sleep=socketio.sleep)
    flask_app.extensions['round_scheduler'] = scheduler

    # Import and register blueprints here
    from sushigo.main import main
    flask_app.register_blueprint(main)

    from sushigo.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    # Register Socket.IO event handlers
    from sushigo.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    return flask_app
