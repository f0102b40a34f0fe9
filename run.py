"""Project root entry point for launching the web interface."""

from __future__ import annotations

import os


def main():
    from langdesk.web import create_app

    app = create_app()
    host = os.environ.get("LANGDESK_HOST", "127.0.0.1")
    port = int(os.environ.get("LANGDESK_PORT", "5500"))
    # Reloader would start a second process competing for the job lease
    app.run(host=host, port=port, debug=False, use_reloader=False)


if __name__ == "__main__":
    main()
