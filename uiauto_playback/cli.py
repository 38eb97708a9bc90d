# uiauto_playback/cli.py
"""
@file cli.py
@brief Command-line interface for uiauto-playback.

Playback itself needs a live surface supplied by a host process, so the
CLI covers the offline parts: document validation and preset listing.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import available_presets
from .exceptions import DocumentError
from .loader import load_document
from .log import setup_logging
from .models.document import TestSuite, step_count
from .steplogger import STEP_LOGGER


def _resolve_document_paths(single: Optional[str], directory: Optional[str]) -> List[str]:
    """Resolve documents for single or bulk validation."""
    if single:
        return [os.path.abspath(single)]
    if not directory:
        return []

    base = Path(directory).resolve()
    if not base.exists() or not base.is_dir():
        return []

    files = list(base.rglob("*.yaml")) + list(base.rglob("*.yml"))
    return sorted({str(path.resolve()) for path in files})


def _parse_vars(pairs: Optional[List[str]]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Invalid --var (expected KEY=VALUE): {pair}")
        key, value = pair.split("=", 1)
        variables[key.strip()] = value
    return variables


def _print_validation_summary(results: List[Dict[str, Any]]) -> None:
    """Print summary for bulk validation."""
    print("\nValidation Summary")
    print("-" * 80)
    print(f"{'#':<4} {'Status':<8} Document")
    for idx, result in enumerate(results, start=1):
        status = str(result.get("status", "unknown")).upper()
        print(f"{idx:<4} {status:<8} {result.get('path', '')}")
    total = len(results)
    invalid = sum(1 for item in results if item.get("status") != "valid")
    print("-" * 80)
    print(f"Total: {total}  Valid: {total - invalid}  Invalid: {invalid}")


def _configure_step_logger_from_env() -> None:
    """Configure step logging from environment variables."""
    enabled = os.getenv("UIAUTO_PLAYBACK_STEP_LOGGING", "").lower() in {"1", "true", "yes", "on"}
    if not enabled:
        STEP_LOGGER.disable()
        return

    STEP_LOGGER.configure(
        console=True,
        file_path=os.getenv("UIAUTO_PLAYBACK_STEP_LOG_FILE") or None,
        format=os.getenv("UIAUTO_PLAYBACK_STEP_LOG_FORMAT", "line"),
    )
    STEP_LOGGER.enable()


def _cmd_validate(args: argparse.Namespace) -> int:
    if args.document and args.documents_dir:
        print("Error: --document and --documents-dir are mutually exclusive", file=sys.stderr)
        return 1
    if not args.document and not args.documents_dir:
        print("Error: one of --document or --documents-dir is required", file=sys.stderr)
        return 1

    try:
        variables = _parse_vars(args.var)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    paths = _resolve_document_paths(args.document, args.documents_dir)
    if not paths:
        print("Error: no document files found", file=sys.stderr)
        return 1

    results: List[Dict[str, Any]] = []
    for path in paths:
        try:
            document = load_document(path, variables)
        except (DocumentError, OSError) as e:
            print(f"X Document is invalid: {path}: {e}", file=sys.stderr)
            results.append({"path": path, "status": "invalid", "error": str(e)})
            continue

        print(f"+ Document is valid: {path}")
        print(f"  - Steps: {step_count(document)}")
        if isinstance(document, TestSuite):
            print(f"  - Test cases: {len(document.test_cases)}")
            print(f"  - Order: {' -> '.join(document.dependency_order())}")
        results.append({"path": path, "status": "valid"})

    if len(results) > 1:
        _print_validation_summary(results)
    return 2 if any(r["status"] != "valid" for r in results) else 0


def _cmd_presets(args: argparse.Namespace) -> int:
    print(json.dumps(available_presets(), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    _configure_step_logger_from_env()

    p = argparse.ArgumentParser(
        prog="uiauto-playback",
        description="uiauto-playback - session engine for recorded UI automation documents",
    )
    p.add_argument("--verbose", action="store_true", help="Show debug logging on the console")
    p.add_argument("--log-file", default=None, help="Optional path for a debug log file")
    sub = p.add_subparsers(dest="cmd", required=True)

    valp = sub.add_parser("validate", help="Validate playback documents")
    valp.add_argument("--document", "-d", default=None, help="Path to a document YAML file")
    valp.add_argument("--documents-dir", default=None, help="Validate all documents under directory (recursively searches for *.yaml/*.yml)")
    valp.add_argument("--var", "-v", action="append", help="Variable in KEY=VALUE format (can be used multiple times)")

    sub.add_parser("presets", help="List timing presets as JSON")

    args = p.parse_args(argv)
    setup_logging(
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    if args.cmd == "validate":
        return _cmd_validate(args)
    if args.cmd == "presets":
        return _cmd_presets(args)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
