from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = [flask_app.config['CLIENT_URL']]
    CORS(flask_app, supports_credentials=True, origins=allowed_origins, methods=['GET', 'POST'])

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins, cors_credentials=True)

    from relay.routes import main
    flask_app.register_blueprint(main)

    # Handlers bind to the server created by init_app above, so they are
    # registered again for every app
    from relay.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    @click.command('serve')
    @click.option('--host', default=None, help='Bind address (defaults to HOST).')
    @click.option('--port', default=None, type=int, help='Port (defaults to PORT).')
    def serve_command(host, port):
        """Runs the Socket.IO relay server."""
        host = host or flask_app.config['HOST']
        port = port or flask_app.config['PORT']
        flask_app.logger.info(f"[serve] listening on http://{host}:{port} origin={flask_app.config['CLIENT_URL']}")
        socketio.run(flask_app, host=host, port=port, allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
