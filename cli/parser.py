"""Command parser for CLI input."""

import re
import shlex

from cli.models import (
    CommandRequest,
    DownloadCommand,
    LoginCommand,
    StatusCommand,
    UploadCommand,
)

BYTE_RANGE_PATTERN = re.compile(r"^(\d*)-(\d*)$")


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Login/Upload/Status/Download)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "login":
        return _parse_login(tokens[1:])
    elif command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "status":
        return _parse_status(tokens[1:])
    elif command_name == "download":
        return _parse_download(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_login(args: list[str]) -> LoginCommand:
    """Parse 'login <username> <password>' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: <username> <password>")

    username, password = args
    return LoginCommand(username=username, password=password)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [file_id]' command."""
    if not args or len(args) > 2:
        raise ParseError("upload requires 1 or 2 arguments: <path> [file_id]")

    file_id = args[1] if len(args) > 1 else None
    return UploadCommand(file_path=args[0], file_id=file_id)


def _parse_status(args: list[str]) -> StatusCommand:
    """Parse 'status <file_id>' command."""
    if len(args) != 1:
        raise ParseError("status requires exactly 1 argument: <file_id>")

    return StatusCommand(file_id=args[0])


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path] [start-end]' command."""
    if not args or len(args) > 3:
        raise ParseError("download requires 1 to 3 arguments: <file_id> [output_path] [start-end]")

    file_id = args[0]
    output_path = None
    byte_range = None

    for arg in args[1:]:
        if _is_byte_range(arg):
            if byte_range is not None:
                raise ParseError("download accepts only one byte range")
            byte_range = arg
        elif output_path is None:
            output_path = arg
        else:
            raise ParseError(f"Invalid byte range: {arg} (expected start-end)")

    return DownloadCommand(file_id=file_id, output_path=output_path, byte_range=byte_range)


def _is_byte_range(arg: str) -> bool:
    """Check for 'start-end', 'start-' or '-suffix' forms."""
    match = BYTE_RANGE_PATTERN.match(arg)
    if not match:
        return False
    start, end = match.groups()
    if not start and not end:
        return False
    if start and end and int(end) < int(start):
        raise ParseError(f"Invalid byte range: {arg} (end before start)")
    return True
