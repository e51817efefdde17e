"""Entry point for running tic-tac-toe via ``python -m tictactoe``."""

from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from .config import Settings, configure_logging
from .console import ConsoleGame


def main(argv: Optional[List[str]] = None) -> None:
    """Start the web server (default) or play in the terminal."""

    parser = argparse.ArgumentParser(prog="tictactoe")
    parser.add_argument(
        "mode", nargs="?", choices=("serve", "console"), default="serve"
    )
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if args.mode == "console":
        ConsoleGame(strict=settings.strict).run()
        return

    uvicorn.run("tictactoe.ui:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
