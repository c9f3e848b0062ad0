"""Flask application factory for the callback server."""

import os

from flask import Flask

from ..config import Config
from ..suppression_store import SuppressionStore


def create_app(config=None, store: SuppressionStore | None = None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration object or dict
        store: Suppression store to share with the dispatcher. If None, one
               is opened in config DATA_DIR.

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        config = Config()

    if isinstance(config, dict):
        app.config.update(config)
    else:
        app.config.from_object(config)

    if store is None:
        store = SuppressionStore(data_dir=app.config.get("DATA_DIR"))
    app.suppression_store = store

    from .routes import callback_bp

    app.register_blueprint(callback_bp)

    return app


def run_dev_server():
    """Run development server."""
    app = create_app()
    try:
        app.run(
            host="0.0.0.0",
            port=int(os.environ.get("PORT", 8080)),
            threaded=True,
        )
    finally:
        app.suppression_store.close()


if __name__ == "__main__":
    run_dev_server()
