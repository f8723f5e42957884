"""Development entrypoint.

Runs the Flask app through the Socket.IO server so websocket upgrades work.
"""

import os

from drawroom import create_app

app = create_app()
socketio = app.extensions["socketio"]


if __name__ == "__main__":
    socketio.run(
        app,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
        debug=bool(app.config.get("DEBUG")),
        allow_unsafe_werkzeug=True,
    )
