"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file, resuming an earlier attempt if one exists."""

    file_path: str
    file_id: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class StatusCommand:
    """Show server-side progress of an upload."""

    file_id: str
    command: Literal["status"] = "status"


@dataclass(frozen=True)
class DownloadCommand:
    """Download an upload's bytes, optionally a single byte range."""

    file_id: str
    output_path: str | None = None
    byte_range: str | None = None
    command: Literal["download"] = "download"


CommandRequest = LoginCommand | UploadCommand | StatusCommand | DownloadCommand
