#  Latam Site - Entry Point
#
#  Launches the FastAPI server via uvicorn.
#
#  Depends on: latam_site/app.py, latam_site/config.py, latam_site/logging_config.py
#  Used by:    (run directly)

import sys

import uvicorn

from latam_site.logging_config import setup_logging


def main():
    try:
        from latam_site.config import HOST, LOG_FORMAT, LOG_LEVEL, PORT, cfg
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(level=LOG_LEVEL, fmt=LOG_FORMAT)

    uvicorn.run(
        "latam_site.app:app",
        host=HOST,
        port=PORT,
        reload=cfg("server.reload", False),
        proxy_headers=cfg("server.trust_proxy", False),
    )


if __name__ == "__main__":
    main()
