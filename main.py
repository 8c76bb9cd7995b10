#!/usr/bin/env python3
"""
Desintesa - Service Orders
Main entry point for the command line application.

Every command prints JSON on stdout; logging goes to stderr.
"""

import argparse
import json
import sys
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config.constants import (  # noqa: E402
    APP_NAME,
    APP_VERSION,
    ERROR_MESSAGES,
    EXIT_ERROR,
    EXIT_INVALID_STATE,
    EXIT_NOT_FOUND,
    EXIT_OK,
    EXIT_STORAGE,
    EXIT_VALIDATION,
)

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """
    Configure logging for the application.

    Sets up console output on stderr (stdout carries command output) with
    pretty formatting. Suppresses noisy third-party loggers.
    """
    # Create formatter with timestamp, level, module name
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Root logger (replace a console handler from an earlier call)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_desintesa_console", False):
            root_logger.removeHandler(handler)
    console_handler._desintesa_console = True
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('pypdf').setLevel(logging.WARNING)
    logging.getLogger('reportlab').setLevel(logging.WARNING)

    logging.debug(f"{APP_NAME} {APP_VERSION} - logging initialized at {level}")


# ==================== Output Helpers ====================


def _to_jsonable(value: Any) -> Any:
    """Convert models, results and dates into JSON-compatible values."""
    from domain.dosage import DosageResult
    from operations.catalog_ops import dosage_to_dict

    if isinstance(value, DosageResult):
        return dosage_to_dict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _print_json(value: Any):
    print(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))


def _read_payload(source: str) -> dict:
    """Read a JSON object from a file path, or stdin for "-"."""
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("payload must be a JSON object")
    return payload


def _parse_day(value: Optional[str]) -> date:
    return date.fromisoformat(value) if value else date.today()


# ==================== Commands ====================


def cmd_list(ctx, args):
    from operations import filter_orders, list_orders

    orders = list_orders(ctx.repository, client_id=args.client)
    if args.status or args.search:
        orders = filter_orders(orders, status=args.status, search=args.search)
    _print_json(orders)


def cmd_show(ctx, args):
    from operations import get_order

    _print_json(get_order(ctx.repository, args.order_id))


def cmd_create(ctx, args):
    from operations import create_order

    order = create_order(ctx.repository, _read_payload(args.file))
    _print_json(order)


def cmd_update(ctx, args):
    from operations import update_order

    order = update_order(ctx.repository, args.order_id, _read_payload(args.file))
    _print_json(order)


def cmd_delete(ctx, args):
    from operations import delete_order

    _print_json(delete_order(ctx.repository, args.order_id))


def cmd_agenda(ctx, args):
    from operations import get_agenda, list_orders

    _print_json(get_agenda(list_orders(ctx.repository)))


def cmd_week(ctx, args):
    from operations import group_agenda_by_week, list_orders

    _print_json(group_agenda_by_week(list_orders(ctx.repository), _parse_day(args.date)))


def cmd_dashboard(ctx, args):
    from operations import get_client_dashboard, list_orders

    _print_json(get_client_dashboard(list_orders(ctx.repository), args.client_id))


def cmd_stats(ctx, args):
    from operations import get_stats, list_orders

    _print_json(get_stats(list_orders(ctx.repository)))


def cmd_kpis(ctx, args):
    from operations import get_daily_kpis, list_orders

    _print_json(get_daily_kpis(list_orders(ctx.repository), _parse_day(args.date)))


def cmd_issue_certificate(ctx, args):
    from operations import issue_certificate

    order = issue_certificate(ctx.repository, args.order_id, folio_prefix=ctx.folio_prefix)
    _print_json(order)


def cmd_certificate(ctx, args):
    from operations import get_certificate
    from services.certificate_pdf import render_certificate_pdf

    document = get_certificate(ctx.repository, args.order_id)
    result = document.to_dict()
    if args.pdf is not None:
        output_dir = Path(args.pdf) if args.pdf else ctx.certificates_dir
        result["pdf"] = str(render_certificate_pdf(document, output_dir))
    _print_json(result)


def cmd_read_folio(ctx, args):
    from services.certificate_pdf import read_certificate_folio

    _print_json({"file": args.pdf_file, "folio": read_certificate_folio(args.pdf_file)})


def cmd_catalog(ctx, args):
    _print_json(ctx.catalog)


def cmd_dosage(ctx, args):
    from operations import calculate_product_dosage, get_order, get_order_dosage

    if args.order:
        _print_json(get_order_dosage(get_order(ctx.repository, args.order)))
        return

    result = calculate_product_dosage(
        ctx.try_catalog(),
        args.product,
        area_m2=args.area,
        tank_liters=args.tank,
        applied_quantity=args.applied,
    )
    _print_json(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="desintesa",
        description=f"{APP_NAME} - pest control service orders and certificates",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--orders", help="Order storage file (overrides DESINTESA_ORDERS_PATH)")
    parser.add_argument(
        "--backend",
        choices=["json", "sqlite"],
        help="Storage backend (overrides DESINTESA_STORAGE_BACKEND)",
    )
    parser.add_argument("--catalog", help="Chemical catalog file (overrides DESINTESA_CATALOG_PATH)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List orders")
    p.add_argument("--client", help="Only orders of this client id")
    p.add_argument("--status", help="scheduled, completed, cancelled or all")
    p.add_argument("--search", help="Match client name, pest type or client id")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Show one order")
    p.add_argument("order_id")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("create", help="Create an order from a JSON payload")
    p.add_argument("--file", required=True, help="Payload file, or - for stdin")
    p.set_defaults(func=cmd_create)

    p = sub.add_parser("update", help="Update an order from a JSON patch")
    p.add_argument("order_id")
    p.add_argument("--file", required=True, help="Patch file, or - for stdin")
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("delete", help="Delete an order")
    p.add_argument("order_id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("agenda", help="Non-cancelled orders by next visit")
    p.set_defaults(func=cmd_agenda)

    p = sub.add_parser("week", help="Agenda grouped into this week / upcoming / past")
    p.add_argument("--date", help="Reference date (YYYY-MM-DD, default today)")
    p.set_defaults(func=cmd_week)

    p = sub.add_parser("dashboard", help="Client dashboard")
    p.add_argument("client_id")
    p.set_defaults(func=cmd_dashboard)

    p = sub.add_parser("stats", help="Order counts by status")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("kpis", help="Daily operational KPIs")
    p.add_argument("--date", help="Reference date (YYYY-MM-DD, default today)")
    p.set_defaults(func=cmd_kpis)

    p = sub.add_parser("issue-certificate", help="Issue the certificate of a completed order")
    p.add_argument("order_id")
    p.set_defaults(func=cmd_issue_certificate)

    p = sub.add_parser("certificate", help="Show certificate data, optionally render PDF")
    p.add_argument("order_id")
    p.add_argument(
        "--pdf",
        nargs="?",
        const="",
        help="Render PDF into this directory (default DESINTESA_CERTIFICATES_DIR)",
    )
    p.set_defaults(func=cmd_certificate)

    p = sub.add_parser("read-folio", help="Read the folio stamped on a certificate PDF")
    p.add_argument("pdf_file")
    p.set_defaults(func=cmd_read_folio)

    p = sub.add_parser("catalog", help="List the chemical catalog")
    p.set_defaults(func=cmd_catalog)

    p = sub.add_parser("dosage", help="Dosage check for a product or an order")
    p.add_argument("--order", help="Check every chemical of this order")
    p.add_argument("--product", help="Catalog product id")
    p.add_argument("--area", help="Treated area in m2")
    p.add_argument("--tank", help="Tank volume in liters")
    p.add_argument("--applied", help="Applied quantity")
    p.set_defaults(func=cmd_dosage)

    return parser


def _error(message: str, code: int, errors: Optional[List[str]] = None) -> int:
    body = {"error": message}
    if errors:
        body["errors"] = errors
    print(json.dumps(body, indent=2, ensure_ascii=False), file=sys.stderr)
    return code


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    from dataclasses import replace

    from config.app_context import create_app_context
    from config.paths import get_orders_path
    from config.settings import get_settings
    from domain.exceptions import (
        CatalogError,
        DesintesaError,
        InvalidStateError,
        NotFoundError,
        StorageError,
        ValidationError,
    )

    args = build_parser().parse_args(argv)

    settings = get_settings()
    overrides = {}
    if args.backend:
        overrides["storage_backend"] = args.backend
        overrides["orders_path"] = get_orders_path(args.backend)
    if args.orders:
        overrides["orders_path"] = Path(args.orders)
    if args.catalog:
        overrides["catalog_path"] = Path(args.catalog)
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        settings = replace(settings, **overrides)

    # Setup logging FIRST
    setup_logging(settings.log_level)

    ctx = create_app_context(settings=settings)
    try:
        args.func(ctx, args)
    except ValidationError as e:
        return _error(
            ERROR_MESSAGES["validation_error"].format(errors="\n".join(e.errors)),
            EXIT_VALIDATION,
            e.errors,
        )
    except NotFoundError as e:
        return _error(ERROR_MESSAGES["not_found"].format(order_id=e.order_id), EXIT_NOT_FOUND)
    except InvalidStateError as e:
        return _error(ERROR_MESSAGES["invalid_state"].format(error=e.message), EXIT_INVALID_STATE)
    except StorageError as e:
        logger.error(f"Storage failure: {e}")
        return _error(ERROR_MESSAGES["storage_error"].format(error=e), EXIT_STORAGE)
    except CatalogError as e:
        return _error(ERROR_MESSAGES["catalog_error"].format(error=e), EXIT_ERROR)
    except DesintesaError as e:
        logger.error(f"Command failed: {e}")
        return _error(str(e), EXIT_ERROR)
    except FileNotFoundError as e:
        return _error(ERROR_MESSAGES["file_not_found"].format(path=e.filename), EXIT_ERROR)
    except ValueError as e:
        # Malformed payload JSON (json.JSONDecodeError) or bad --date
        return _error(ERROR_MESSAGES["invalid_payload"].format(error=e), EXIT_ERROR)
    finally:
        ctx.close()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
