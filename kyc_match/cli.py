from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .commands import check_document as cmd_check_document
from .commands import compare as cmd_compare
from .commands import doctor as cmd_doctor
from .commands import review as cmd_review
from .commands import verify as cmd_verify
from .config import Settings, find_config
from .models import KycMatchError

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def configure_logging(level_name: str) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    logging.getLogger("watchdog").setLevel(logging.WARNING)
    return warn_buffer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="KYC identity document name matching")
    parser.add_argument("--config", type=Path, help="Path to kyc-match.yaml")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    compare_parser = subparsers.add_parser(
        "compare", help="Compare a document name with a profile name"
    )
    compare_parser.add_argument("extracted", help="Name read from the document")
    compare_parser.add_argument("profile", help="Name on the user profile")
    compare_parser.add_argument(
        "--json", action="store_true", help="Emit machine-readable JSON to stdout"
    )
    verify_parser = subparsers.add_parser(
        "verify", help="Verify a saved KYC upload response"
    )
    verify_parser.add_argument("response", type=Path, help="Upload response JSON file")
    source = verify_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--profile-name", default=None, help="Profile name to compare against")
    source.add_argument(
        "--session", type=Path, default=None, help="Session JSON holding authToken and user"
    )
    verify_parser.add_argument(
        "--json", action="store_true", help="Emit machine-readable JSON to stdout"
    )
    document_parser = subparsers.add_parser(
        "check-document", help="Run the pre-upload checks on identity images"
    )
    document_parser.add_argument("paths", type=Path, nargs="+")
    review_parser = subparsers.add_parser(
        "review", help="Verify every upload response in the inbox"
    )
    review_parser.add_argument("inbox", type=Path, nargs="?", default=None)
    review_parser.add_argument("--out", type=Path, default=None, help="Verdict JSON Lines file")
    watch_parser = subparsers.add_parser(
        "watch", help="Verify upload responses as they arrive in the inbox"
    )
    watch_parser.add_argument("inbox", type=Path, nargs="?", default=None)
    watch_parser.add_argument("--out", type=Path, default=None, help="Verdict JSON Lines file")
    subparsers.add_parser("doctor", help="Run basic config/inbox/session checks")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    warn_buffer = configure_logging(args.log_level)

    try:
        config_path = find_config(args.config)
        settings = Settings.load(config_path)
        if getattr(args, "inbox", None) is not None:
            settings.review.inbox = args.inbox.expanduser().resolve()
        if getattr(args, "out", None) is not None:
            settings.review.output = args.out.expanduser().resolve()
        thresholds = settings.matching.thresholds()

        match args.command:
            case "compare":
                cmd_compare.run(
                    args.extracted,
                    args.profile,
                    thresholds=thresholds,
                    json_output=args.json,
                )
            case "verify":
                cmd_verify.run(
                    args.response,
                    profile_name=args.profile_name,
                    session_file=args.session,
                    thresholds=thresholds,
                    json_output=args.json,
                )
            case "check-document":
                failed = cmd_check_document.run(args.paths, settings.uploads)
                if failed:
                    raise SystemExit(1)
            case "review":
                summary = cmd_review.run(settings)
                if summary.errors:
                    raise SystemExit(1)
            case "watch":
                cmd_review.watch(settings)
            case "doctor":
                report = cmd_doctor.run(settings, config_path=config_path)
                for line in report.checks:
                    print(line)
                if not report.ok:
                    raise SystemExit(1)
            case _:
                parser.error("Unknown command")
    except KycMatchError as exc:
        raise SystemExit(f"Error: {exc}") from exc
    finally:
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
