#!/usr/bin/env python3
"""
Entry point for the untagged container version cleaner.

Usage examples:
  # Clean up the repository the workflow runs in (GitHub Actions inputs)
  INPUT_REPOSITORY=octo-org/octo-repo INPUT_GH_TOKEN=... python main.py

  # Local run with explicit arguments
  GH_TOKEN=... python main.py --repository octo-org/octo-repo

  # Local run reading config.yaml (non-production environment)
  ENVIRONMENT=development python main.py --repository octo-user/dotfiles

  # Limit concurrency and save a JSON summary
  python main.py --repository octo-org/octo-repo --max-workers 8 --output reports/untagged.json
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from scripts.delete_untagged_versions import UntaggedVersionCleaner
from utils.config_manager import ConfigManager
from utils.error_utils import CleanupError, create_config_error
from utils.github_client import GitHubClient
from utils.logging_utils import get_logger, log_exception, resolve_log_level, setup_logging
from utils.report_utils import build_deletion_report, save_json
from utils.workflow_commands import mask_secret, set_failed

logger = get_logger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Delete untagged container package versions linked to a GitHub repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The repository and token default to the GitHub Actions inputs
(INPUT_REPOSITORY, INPUT_GH_TOKEN), then REPOSITORY and GH_TOKEN/GITHUB_TOKEN.
The token needs the read:packages and delete:packages scopes.
        """,
    )

    parser.add_argument("--repository", help="Repository as owner/name (default: from environment or config)")
    parser.add_argument(
        "--token",
        help="API token (default: INPUT_GH_TOKEN, GH_TOKEN or GITHUB_TOKEN; prefer the environment over this flag)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Cap on concurrent API calls per stage (default: from config, 0 = one per package/version)",
    )
    parser.add_argument("--output", help="Write a JSON summary of the deleted versions to this path")
    parser.add_argument(
        "--save-report",
        action="store_true",
        help="Write a timestamped JSON summary to the configured output directory",
    )
    parser.add_argument("--config", help="Path to config.yaml (only read when ENVIRONMENT is non-production)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--print-config", action="store_true", help="Print the effective configuration and exit")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one cleanup. Returns the process exit code."""
    args = parse_arguments(argv)
    setup_logging()
    logging.getLogger().setLevel(resolve_log_level(args.log_level))

    client = None
    try:
        config = ConfigManager(config_file=args.config, validate=False)

        token = args.token or config.get_token()
        mask_secret(token)

        if args.print_config:
            config.print_config()
            return 0

        config.validate_config()

        repository = args.repository or config.get_repository()
        if not repository:
            raise create_config_error("repository", repository, "A repository identifier (owner/name) is required")
        if not token:
            raise create_config_error("gh_token", "<unset>", "A token with read:packages and delete:packages is required")

        max_workers = args.max_workers if args.max_workers is not None else config.get_max_workers()
        if max_workers < 0:
            raise create_config_error("max_workers", max_workers, "Must be 0 (uncapped) or a positive integer")

        client = GitHubClient(config, token)
        cleaner = UntaggedVersionCleaner(client, max_workers=max_workers)
        deleted_version_ids = cleaner.run(repository)

        if args.output or args.save_report:
            report = build_deletion_report(repository, deleted_version_ids)
            if args.output:
                save_json(args.output, report)
            if args.save_report:
                save_json(os.path.join(config.get_output_dir(), "untagged-versions.json"), report, timestamp=True)

        return 0

    except CleanupError as e:
        set_failed(str(e))
        return 1
    except Exception as e:
        log_exception(logger, "Unexpected error during cleanup", e)
        set_failed(str(e) or type(e).__name__)
        return 1
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
