"""Entry point for running scholarai as a module or installed script.

Usage:
    scholarai / python -m scholarai   → JSON app on http://127.0.0.1:8000
"""

import logging

import uvicorn

from scholarai.config import Settings


def run() -> None:
    """Entry point: configure logging from settings and serve the app."""
    settings = Settings.load()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run("scholarai.gui.app:app", host="127.0.0.1", port=8000)


if __name__ == "__main__":
    run()
