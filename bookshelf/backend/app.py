from flask import Flask
from flask_pymongo import PyMongo
import atexit
import logging
import os

from shared.modules.cache.cache_store import CacheStore
from shared.modules.cache.redis_cache_store import RedisCacheStore

logger = logging.getLogger(__name__)

mongo = PyMongo()

# Settings where 0 would disable expiry or blocking timeouts
POSITIVE_SETTINGS = (
    "MONGO_SERVER_SELECTION_TIMEOUT_MS",
    "REDIS_SOCKET_TIMEOUT",
    "CACHE_LISTING_TTL",
    "CACHE_ENTITY_TTL",
    "CACHE_VIEW_TTL",
)


def _load_config(app: Flask, overrides=None):
    # MongoDB config
    app.config["MONGO_URI"] = os.environ.get(
        "MONGO_URI", "mongodb://localhost:27017/bookshelf"
    )
    app.config["MONGO_SERVER_SELECTION_TIMEOUT_MS"] = int(
        os.environ.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000)
    )
    # Redis cache config
    app.config["REDIS_URL"] = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    app.config["REDIS_SOCKET_TIMEOUT"] = float(os.environ.get("REDIS_SOCKET_TIMEOUT", 5))
    app.config["CACHE_LISTING_TTL"] = int(os.environ.get("CACHE_LISTING_TTL", 3600))
    app.config["CACHE_ENTITY_TTL"] = int(os.environ.get("CACHE_ENTITY_TTL", 3600))
    app.config["CACHE_VIEW_TTL"] = int(os.environ.get("CACHE_VIEW_TTL", 3600))
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")
    if overrides:
        app.config.update(overrides)

    for key in POSITIVE_SETTINGS:
        if app.config[key] <= 0:
            raise ValueError(f"{key} must be greater than 0, got {app.config[key]}")


def create_app(config=None, cache_store: CacheStore = None) -> Flask:
    """
    Build the catalog application.

    The Redis cache store is process-wide: it is opened here, shared by every
    request handler through ``app.extensions["cache_store"]`` and closed when
    the interpreter exits.
    """
    app = Flask(__name__)
    _load_config(app, config)

    mongo.init_app(app, serverSelectionTimeoutMS=app.config["MONGO_SERVER_SELECTION_TIMEOUT_MS"])

    if cache_store is None:
        cache_store = RedisCacheStore(app.config["REDIS_URL"], app.config["REDIS_SOCKET_TIMEOUT"])
    cache_store.open()
    app.extensions["cache_store"] = cache_store
    atexit.register(cache_store.close)

    # Import and register blueprints after mongo is initialized
    from backend.api.author_controller import bp as author_controller_bp
    from backend.api.book_controller import bp as book_controller_bp
    app.register_blueprint(author_controller_bp)
    app.register_blueprint(book_controller_bp)

    logger.info(f"Catalog app created (mongo={app.config['MONGO_URI']}, redis={app.config['REDIS_URL']})")
    return app


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    app = create_app()
    app.run(host="0.0.0.0", port=8000, debug=False, threaded=True)
