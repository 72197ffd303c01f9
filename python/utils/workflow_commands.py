"""
GitHub Actions workflow commands.

When the cleaner runs as an Actions step, the runner reads commands like
::add-mask:: and ::error:: from stdout. Outside Actions these helpers only
log, so local runs are not littered with runner syntax.
"""

import os
import sys
from typing import Optional, TextIO

from utils.logging_utils import get_logger

logger = get_logger(__name__)


def running_in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"


def escape_data(value: str) -> str:
    """Escape a command payload; the runner decodes %25, %0D and %0A"""
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def issue_command(command: str, message: str = "", stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    stream.write(f"::{command}::{escape_data(message)}\n")
    stream.flush()


def mask_secret(value: Optional[str], stream: Optional[TextIO] = None) -> None:
    """Register value with the runner so it is redacted from all later output"""
    if not value or not running_in_github_actions():
        return
    issue_command("add-mask", value, stream)


def set_failed(message: str, stream: Optional[TextIO] = None) -> None:
    """Log the failure and, under Actions, annotate the step with it"""
    logger.error(message)
    if running_in_github_actions():
        issue_command("error", message, stream)
