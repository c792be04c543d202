import argparse
import json
import signal
import sys
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from docscan.archive.models import DEFAULT_CATEGORY, DEFAULT_PRIORITY, DEFAULT_TAGS, UserMetadata
from docscan.auth.capabilities import ALL_CAPABILITIES
from docscan.auth.models import Actor
from docscan.batch.cancellation import CancellationToken
from docscan.batch.models import BatchResult
from docscan.config.settings import Settings
from docscan.database.connection import apply_schema, close_pool, init_pool
from docscan.logging.logger import Log
from docscan.processor.service import ScanningService, build_scanning_service
from docscan.scanning.models import Backend, ColorMode, ImageFormat, ScanOptions

DATABASE_COMMANDS = frozenset({"archive", "reference", "stats", "init-db"})


def _add_scan_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("device_id", help="Backend-native device id from 'discover'")
    parser.add_argument("--backend", choices=[b.value for b in Backend])
    parser.add_argument("--resolution", type=int, default=300, help="DPI")
    parser.add_argument("--format", choices=[f.value for f in ImageFormat], default="jpeg")
    parser.add_argument("--quality", type=int, default=90)
    parser.add_argument("--page-size", default="A4")
    parser.add_argument("--color-mode", choices=[c.value for c in ColorMode], default="color")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docscan",
        description="Scan, OCR and archive physical documents.",
    )
    parser.add_argument("--actor", default="cli", help="Actor id recorded in the audit trail")
    parser.add_argument("--department")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("discover", help="List available scanners")

    scan = sub.add_parser("scan", help="Capture a single page")
    _add_scan_options(scan)

    batch = sub.add_parser("batch-scan", help="Capture several pages in a row")
    _add_scan_options(batch)
    batch.add_argument("count", type=int)

    archive = sub.add_parser("archive", help="Capture pages and archive them as records")
    _add_scan_options(archive)
    archive.add_argument("count", type=int)
    archive.add_argument("--title")
    archive.add_argument("--description")
    archive.add_argument("--category", default=DEFAULT_CATEGORY)
    archive.add_argument("--priority", default=DEFAULT_PRIORITY)
    archive.add_argument("--tag", action="append", dest="tags")
    archive.add_argument("--confidential", action="store_true")
    archive.add_argument("--original-date")
    archive.add_argument("--location")
    archive.add_argument("--box", type=int)
    archive.add_argument("--folder", type=int)

    reference = sub.add_parser("reference", help="Show the next archive reference")
    reference.add_argument("category")
    reference.add_argument("--year", type=int)

    stats = sub.add_parser("stats", help="Archive statistics per category and month")
    stats.add_argument("--year", type=int)

    sub.add_parser("init-db", help="Create the archive tables")

    return parser


def _scan_options(args: argparse.Namespace) -> ScanOptions:
    return ScanOptions(
        resolution_dpi=args.resolution,
        format=args.format,
        quality_percent=args.quality,
        page_size=args.page_size,
        color_mode=args.color_mode,
    )


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _batch_payload(batch: BatchResult[Any]) -> dict[str, Any]:
    return {
        "succeeded_count": batch.succeeded_count,
        "failed_count": batch.failed_count,
        "cancelled": batch.cancelled,
        "items": [asdict(item) for item in batch.items],
    }


def run_command(
    service: ScanningService,
    args: argparse.Namespace,
    actor: Actor,
    cancel_token: CancellationToken,
) -> int:
    backend = Backend(args.backend) if getattr(args, "backend", None) else None

    if args.command == "discover":
        _emit([asdict(device) for device in service.discover(actor)])
    elif args.command == "scan":
        _emit(asdict(service.scan(actor, args.device_id, _scan_options(args), backend)))
    elif args.command == "batch-scan":
        batch = service.scan_batch(
            actor, args.device_id, args.count, _scan_options(args), backend, cancel_token
        )
        _emit(_batch_payload(batch))
        return 0 if batch.failed_count == 0 else 1
    elif args.command == "archive":
        scans = service.scan_batch(
            actor, args.device_id, args.count, _scan_options(args), backend, cancel_token
        )
        template = UserMetadata(
            title=args.title,
            description=args.description,
            category=args.category,
            priority=args.priority,
            department=args.department,
            tags=tuple(args.tags) if args.tags else DEFAULT_TAGS,
            is_confidential=args.confidential,
            original_date=args.original_date,
            archive_location=args.location,
            box_number=args.box,
            folder_number=args.folder,
        )
        records = service.build_records(actor, scans.items, template, cancel_token)
        _emit(_batch_payload(records))
        return 0 if records.failed_count == 0 else 1
    elif args.command == "reference":
        _emit(asdict(service.create_archive_batch(actor, args.category, args.year)))
    elif args.command == "stats":
        stats = service.archive_stats(actor, args.year)
        _emit(
            {
                "year": stats.year,
                "total_categories": len(stats.categories),
                "total_documents": stats.total_documents,
                "total_size": stats.total_size,
                "avg_confidence": stats.avg_confidence,
                "categories": [asdict(category) for category in stats.categories],
            }
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> configure logging -> build service -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, settings.log_file)

    needs_database = (
        args.command in DATABASE_COMMANDS or settings.audit_sink.lower() == "database"
    )
    if needs_database:
        init_pool(settings)

    cancel_token = CancellationToken()

    def _cancel(signum: int, frame: object) -> None:
        Log.warning("Interrupt received, stopping after the current document")
        cancel_token.cancel()

    previous_handler = signal.signal(signal.SIGINT, _cancel)
    actor = Actor(id=args.actor, department=args.department, capabilities=ALL_CAPABILITIES)
    try:
        if args.command == "init-db":
            apply_schema()
            return 0
        service = build_scanning_service(settings)
        return run_command(service, args, actor, cancel_token)
    except Exception as exc:
        Log.error(f"{args.command} failed: {exc}")
        return 2
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        if needs_database:
            close_pool()


if __name__ == "__main__":
    sys.exit(main())
