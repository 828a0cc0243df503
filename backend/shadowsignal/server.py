from __future__ import annotations

import os
import random
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.store import RoomStore
from .realtime.broadcast import SocketIOBroadcaster
from .realtime.controller import RoomController
from .realtime.handlers import register_socketio_handlers
from .realtime.scheduler import SocketIOScheduler
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .services.hints import HintService


def _default_async_mode() -> str:
    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        return env_async_mode
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    async_mode: str | None = None,
    hints=None,
    scheduler=None,
    rng: random.Random | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(Config)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode or _default_async_mode(),
    )

    store = RoomStore()
    controller = RoomController(
        store,
        SocketIOBroadcaster(socketio, store),
        scheduler or SocketIOScheduler(socketio),
        hints or HintService.from_config(Config),
        rng=rng,
    )
    app.extensions["shadowsignal"] = controller

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, controller)

    @app.get("/")
    def index():
        return "Shadow Signal Server is Online"

    return app, socketio
