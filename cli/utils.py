"""Formatting and progress helpers for CLI output."""

import sys
from pathlib import Path

from cli.constants import GREEN, RESET

SIZE_UNITS = ('B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB')


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count with binary (1024-based) units.

    Returns:
        e.g. "512 B", "1.50 MiB"
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in SIZE_UNITS[1:-1]:
        size /= 1024.0
        if size < 1024.0:
            return f"{size:.2f} {unit}"

    return f"{size / 1024.0:.2f} {SIZE_UNITS[-1]}"


def format_progress(done: int, total: int) -> str:
    """Render "<done> / <total> (NN.N%)" for a transfer."""
    percent = (done / total) * 100 if total else 0.0
    return f"{format_file_size(done)} / {format_file_size(total)} ({percent:.1f}%)"


def resume_key(file_path: Path) -> str:
    """Key under which an unfinished upload of file_path is remembered."""
    return str(Path(file_path).expanduser().resolve())


def write_progress(label: str, done: int, total: int) -> None:
    """Redraw the progress line in place."""
    sys.stdout.write(f"\r{label}: {GREEN}{format_progress(done, total)}{RESET}")
    sys.stdout.flush()


def end_progress() -> None:
    sys.stdout.write('\n')
    sys.stdout.flush()
