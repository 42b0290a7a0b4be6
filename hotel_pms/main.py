"""Entry point printing a hotel's dashboard snapshot as JSON."""

import argparse
import asyncio
import json
import sys
from datetime import date
from typing import Any, Optional

from hotel_pms.config import configure_logging, get_logger, settings
from hotel_pms.errors import PMSError
from hotel_pms.models import DisplayCurrency
from hotel_pms.services import AnalyticsAggregator, ReservationService, RoomStatusProjector
from hotel_pms.store import build_store

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a hotel dashboard snapshot as JSON")
    parser.add_argument("--hotel-id", required=True, help="Hotel to report on")
    parser.add_argument(
        "--month",
        default=date.today().strftime("%Y-%m"),
        help="Month for the KPIs, YYYY-MM (default: current month)",
    )
    parser.add_argument(
        "--currency",
        default=DisplayCurrency.EUR.value,
        choices=[c.value for c in DisplayCurrency],
        help="Display currency for monetary KPIs",
    )
    parser.add_argument("--today", type=date.fromisoformat, help="Day for the room board, YYYY-MM-DD")
    return parser.parse_args(argv)


async def build_snapshot(args: argparse.Namespace) -> dict[str, Any]:
    """Load the room board, front-desk counters and KPIs for one hotel."""
    store = build_store()
    try:
        today = args.today or date.today()
        board = await RoomStatusProjector(store).room_board(args.hotel_id, today)
        summary = await ReservationService(store).summarize(args.hotel_id, today)
        kpis = await AnalyticsAggregator(store).dashboard_kpis(
            args.hotel_id, args.month, DisplayCurrency(args.currency)
        )
    finally:
        await store.close()

    return {
        "hotel_id": args.hotel_id,
        "today": today.isoformat(),
        "room_board": [group.model_dump(mode="json") for group in board],
        "summary": summary.model_dump(mode="json"),
        "kpis": kpis.model_dump(mode="json"),
    }


async def main(argv: Optional[list[str]] = None) -> int:
    """Main async function.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    logger.info("Starting dashboard snapshot", environment=settings.environment, hotel_id=args.hotel_id)

    missing = settings.validate_backend()
    if missing:
        logger.error("Store backend config incomplete", missing=missing)
        print(json.dumps({"success": False, "error": f"Missing: {', '.join(missing)}"}))
        return 1

    try:
        snapshot = await build_snapshot(args)
    except PMSError as e:
        logger.error("Dashboard snapshot failed", hotel_id=args.hotel_id, error=e.message)
        print(json.dumps({"success": False, **e.to_user_message()}))
        return 1
    except Exception as e:
        logger.error("Fatal error in main application", error=str(e), exc_info=True)
        return 1

    print(json.dumps(snapshot, indent=2, default=str))
    return 0


def run_sync(argv: Optional[list[str]] = None) -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    return asyncio.run(main(argv))


if __name__ == "__main__":
    configure_logging()
    sys.exit(run_sync())
