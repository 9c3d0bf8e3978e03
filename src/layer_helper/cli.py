"""
layer_helper.cli — Command-line entrypoint.

Usage:
    layer-helper [--layer-name NAME] [--manifest requirements.txt] [--edit] [--yes]

The layer name is prompted for when not given.  A name given on the command
line must already be valid; it is never rewritten.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from layer_helper.config import (
    DEFAULT_MANIFEST,
    DEFAULT_PYTHON_VERSION,
    build_context,
    is_valid_layer_name,
)
from layer_helper.console import prompt_layer_name
from layer_helper.pipeline import EXIT_FAILURE, default_collaborators, run_pipeline

logger = logging.getLogger("layer_helper")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="layer-helper",
        description="Build a Python dependency layer from a requirements file and publish it",
    )
    parser.add_argument(
        "--layer-name",
        help="Layer name (a-z, A-Z, 0-9, hyphens, periods). Prompted for when omitted.",
    )
    parser.add_argument(
        "--manifest",
        default=DEFAULT_MANIFEST,
        help=f"Requirements file (default: {DEFAULT_MANIFEST})",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        default=None,
        help="Directory for the build environment, staging dir and archive (default: cwd)",
    )
    parser.add_argument(
        "--python-version",
        default=DEFAULT_PYTHON_VERSION,
        help=f"Interpreter version to build with (default: {DEFAULT_PYTHON_VERSION})",
    )
    parser.add_argument("--editor", help="Editor command (default: $LAYER_HELPER_EDITOR, $EDITOR, c9)")
    parser.add_argument("--region", help="AWS region (default: $AWS_REGION / $AWS_DEFAULT_REGION)")
    parser.add_argument(
        "--s3-bucket",
        help="Upload the archive here and publish by reference (default: $LAYER_HELPER_S3_BUCKET)",
    )
    parser.add_argument("--description", help="Layer version description")
    parser.add_argument(
        "--edit",
        action="store_true",
        help="Open the manifest in the editor before validating it",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip the final confirmation prompt",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.layer_name is None:
            layer_name = prompt_layer_name()
        elif is_valid_layer_name(args.layer_name):
            layer_name = args.layer_name
        else:
            logger.error(
                "Invalid layer name %r: use only a-z, A-Z, 0-9, hyphens, and periods",
                args.layer_name,
            )
            return EXIT_FAILURE

        ctx = build_context(
            layer_name=layer_name,
            work_dir=args.work_dir,
            manifest=args.manifest,
            python_version=args.python_version,
            editor=args.editor,
            region=args.region,
            s3_bucket=args.s3_bucket,
            description=args.description,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        logger.error("No layer name provided")
        return EXIT_FAILURE

    try:
        result = run_pipeline(
            ctx,
            default_collaborators(ctx),
            edit_first=args.edit,
            assume_yes=args.yes,
        )
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        logger.error("Interrupted")
        return EXIT_FAILURE
    except OSError as exc:
        logger.error("layer_helper failed: %s", exc)
        return EXIT_FAILURE
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
