"""Jokes entrypoint.

Run with:
  python -m jokes
"""

import logging
import os

import uvicorn


def main() -> None:
    level = os.getenv("JOKES_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.getenv("JOKES_HOST", "0.0.0.0")
    port = int(os.getenv("JOKES_PORT", "8000"))
    reload = os.getenv("JOKES_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("jokes.app:app", host=host, port=port, reload=reload, log_level=level.lower())

if __name__ == "__main__":
    main()
