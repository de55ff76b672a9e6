#!/usr/bin/env python3
"""
Application entry point.

Run the Flask application with: python run.py
"""

import logging
import os

from training_server import create_app

# Create the Flask application
app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # Get port from environment or default to 8080
    port = int(os.getenv("PORT", "8080"))
    host = os.getenv("HOST", "0.0.0.0")
    debug = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

    # Threaded: app fan-out calls block a worker thread each
    app.run(host=host, port=port, threaded=True, debug=debug)
