import socket

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _local_ip() -> str:
    """Best-effort LAN address so phones on the same network can join."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packets are sent; connecting a UDP socket only picks a route
        sock.connect(('10.255.255.255', 1))
        return sock.getsockname()[0]
    except OSError:
        return '127.0.0.1'
    finally:
        sock.close()


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Sushi Go game server!'})


@main.route('/api/health')
def health():
    registry = current_app.extensions['match_registry']
    return jsonify({'status': 'ok', 'matches': len(registry)})


@main.route('/api/server-info')
def server_info():
    ip = _local_ip()
    port = current_app.config.get('CLIENT_PORT', 5173)
    return jsonify({'ip': ip, 'port': port, 'url': f'http://{ip}:{port}'})
