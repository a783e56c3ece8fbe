import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173,"
    "http://127.0.0.1:5173,"
    "http://localhost:5174,"
    "http://127.0.0.1:5174"
)

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Pause between a round's scoreboard and the next deal (seconds)
    ROUND_END_DELAY_SEC = float(os.environ.get('ROUND_END_DELAY_SEC', '5'))
    # Seats available per match
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '4'))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', DEFAULT_CORS_ORIGINS).split(',') if o.strip()]
    # Port the web client is served on; reported by /api/server-info for join links
    CLIENT_PORT = int(os.environ.get('CLIENT_PORT', '5173'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
