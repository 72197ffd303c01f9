"""
JSON summaries of cleanup runs.

A summary records which repository was cleaned and the ids of the removed
versions. It can be written to an explicit path or, with a timestamp in the
filename, into the configured reports directory so runs do not overwrite
each other.
"""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from utils.logging_utils import get_logger

logger = get_logger(__name__)


def get_timestamp_suffix() -> str:
    """Local time as YYYY-MM-DD-HH-MM-SS, safe for filenames."""
    return datetime.now().strftime("%Y-%m-%d-%H-%M-%S")


def add_timestamp_to_path(path: str, timestamp: Optional[str] = None) -> str:
    """
    Insert ``-<timestamp>`` between the file stem and its extension.

    'reports/untagged-versions.json' becomes
    'reports/untagged-versions-2026-01-15-14-30-00.json'.
    """
    p = Path(path)
    suffix = timestamp or get_timestamp_suffix()
    return str(p.parent / f"{p.stem}-{suffix}{p.suffix}")


def build_deletion_report(repository: str, deleted_version_ids: Sequence[Any]) -> Dict[str, Any]:
    """Summary of one cleanup run, ids in the order their deletions completed"""
    return {
        "repository": repository,
        "deleted_versions": list(deleted_version_ids),
        "count": len(deleted_version_ids),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def save_json(path: str, data: Any, timestamp: bool = False) -> str:
    """
    Write ``data`` as indented JSON, creating parent directories.

    Args:
        path: Destination file
        data: JSON-serialisable data; other values are written with str()
        timestamp: Add a timestamp to the filename first

    Returns:
        The path actually written
    """
    target = Path(add_timestamp_to_path(path)) if timestamp else Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    with open(target, "w") as f:
        json.dump(data, f, indent=2, default=str)
    logger.info(f"📄 Report written to {target}")
    return str(target)
