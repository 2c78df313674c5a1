"""Project-wide constants shared by the server and the CLI."""

DEFAULT_CHUNK_SIZE_BYTES: int = 1 << 20  # 1 MiB, matches the browser client
DEFAULT_SERVER_PORT: int = 8080
STREAM_PIECE_SIZE: int = 64 * 1024

BYTES_UNIT = "bytes"
