"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["login", "upload", "status", "download", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#F45935 bold",
        "command": "#0088ff bold",
    }
)

RED_ORANGE = "\033[38;2;244;89;53m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{RED_ORANGE}
 ██╗   ██╗██████╗ ██╗      ██████╗  █████╗ ██████╗ ███████╗
 ██║   ██║██╔══██╗██║     ██╔═══██╗██╔══██╗██╔══██╗██╔════╝
 ██║   ██║██████╔╝██║     ██║   ██║███████║██║  ██║███████╗
 ██║   ██║██╔═══╝ ██║     ██║   ██║██╔══██║██║  ██║╚════██║
 ╚██████╔╝██║     ███████╗╚██████╔╝██║  ██║██████╔╝███████║
  ╚═════╝ ╚═╝     ╚══════╝ ╚═════╝ ╚═╝  ╚═╝╚═════╝ ╚══════╝
{RESET}"""

WELCOME_TITLE = "Resumable Uploads CLI - Chunked file transfer"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "uploads> "

HELP_TEXT = """Available commands:
  login <username> <password>                  Login and save access token
  upload <path> [file_id]                      Upload a file in chunks (resumes unfinished uploads)
  status <file_id>                             Show how many bytes the server has received
  download <file_id> [output_path] [start-end] Download an upload, optionally one byte range
  clear                                        Clear screen and redisplay welcome message
  help                                         Show this help
  exit                                         Exit REPL

Interrupted uploads resume from the server's next expected byte
when the same upload command is run again.
Examples:
  login admin secret
  upload videos/holiday.mp4
  upload report.pdf file-report-2024
  status file-report-2024
  download file-report-2024 downloads/report.pdf
  download file-report-2024 head.bin 0-1023"""
