from dotenv import load_dotenv

load_dotenv()

try:
    from backend.shadowsignal.config import configure_logging
    from backend.shadowsignal.server import create_app
except ImportError:  # pragma: no cover
    from shadowsignal.config import configure_logging
    from shadowsignal.server import create_app

configure_logging()

app, socketio = create_app()
