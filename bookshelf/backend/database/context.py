"""
Database context for the Flask application.
Provides the MongoDB database and the cache store without explicit
dependency passing in controllers.
"""
from flask import current_app, g


class DatabaseContext:
    """
    Flask context accessor for the shared connections.
    Works in both request context (controllers) and application context (scripts, shell).
    """

    @staticmethod
    def get_mongo_db():
        """
        Get MongoDB database instance from Flask context.
        Cached on ``g`` for the rest of the request.
        """
        if "mongo_db" not in g:
            from backend.app import mongo
            g.mongo_db = mongo.db
        return g.mongo_db

    @staticmethod
    def get_cache_store():
        """Get the process-wide cache store opened by create_app."""
        return current_app.extensions["cache_store"]
