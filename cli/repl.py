"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    get_client,
    handle_download,
    handle_login,
    handle_status,
    handle_upload,
)
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    DownloadCommand,
    LoginCommand,
    StatusCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command

HANDLERS = {
    LoginCommand: handle_login,
    UploadCommand: handle_upload,
    StatusCommand: handle_status,
    DownloadCommand: handle_download,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj)


def bottom_toolbar() -> str:
    """Show which server the session talks to and whether a token is saved."""
    config = get_client().config
    state = "logged in" if config.get_token() else "not logged in"
    return f" {config.get_base_url()} | {state} "


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=WordCompleter(COMMANDS, ignore_case=True),
        history=InMemoryHistory(),
        style=STYLE,
        bottom_toolbar=bottom_toolbar,
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input == "exit":
            print("Goodbye!")
            break
        if user_input == "help":
            print(HELP_TEXT)
            continue
        if user_input == "clear":
            clear_screen()
            show_welcome()
            continue

        try:
            print(dispatch_command(parse_command(user_input)))
        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            print("\nInterrupted. Run the same command again to resume an upload.")
