"""CLI entry point."""

import os
import sys
from pathlib import Path
from typing import Optional

from common.logging_config import setup_logging
from cli.commands import set_config_path
from cli.repl import repl_loop

USAGE = "usage: resumable-uploads [--debug] [--config PATH]"


def _pop_option(args: list[str], name: str) -> Optional[str]:
    """Remove ``name VALUE`` from args and return VALUE."""
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        raise SystemExit(f"{name} requires a value\n{USAGE}")
    value = args[index + 1]
    del args[index:index + 2]
    return value


def main() -> None:
    """Entry point for CLI."""
    args = sys.argv[1:]

    debug = '--debug' in args
    if debug:
        args.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    config_path = _pop_option(args, '--config') or os.getenv('UPLOAD_CLI_CONFIG')
    if config_path:
        set_config_path(Path(config_path).expanduser())
        logger.info(f"Using config file {config_path}")

    if args:
        raise SystemExit(f"unexpected arguments: {' '.join(args)}\n{USAGE}")

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
