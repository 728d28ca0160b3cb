# lineview/app/main.py
"""Console host for one line-item panel.

Runs the panel on an asyncio loop and logs the table whenever rows change.
``--demo`` wires in-memory adapters and plays a short scripted session
(external change, delete, detach) instead of connecting to a backend.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
from typing import List, Optional

from ..adapters.navigation_log import LoggingNavigator
from ..adapters.push_mock import PushChannelMock
from ..adapters.records_mock import RecordsMock
from ..adapters.storage_local import StorageLocal
from ..domain.actions import ACTION_DELETE, ACTION_VIEW
from ..domain.settings import SettingsConfig
from ..utils import logging as logging_utils
from ..viewmodels.line_items_vm import DisplayRow
from .controller import AppController
from .line_items_panel import LineItemsPanel

log = logging.getLogger(__name__)

_DEMO_PARENT = "OPP1"


def render_rows(rows: List[DisplayRow]) -> str:
    """Format rows as a fixed-width text table."""
    header = f"{'Product':<24} {'Unit':>10} {'Total':>10} {'Qty':>5} {'Stock':>6}  Actions"
    lines = [header, "-" * len(header)]
    for row in rows:
        marker = " !" if row.has_stock_error else ""
        lines.append(
            f"{row.product_name[:24]:<24} {row.unit_price:>10.2f} {row.total_price:>10.2f} "
            f"{row.quantity:>5} {row.stock_quantity:>6}  {','.join(row.actions)}{marker}"
        )
    if not rows:
        lines.append("(no rows)")
    return "\n".join(lines)


def _log_rows(rows: List[DisplayRow]) -> None:
    log.info("Line items:\n%s", render_rows(rows))


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI args for the console host."""
    parser = argparse.ArgumentParser(description="Show line items of a parent record.")
    parser.add_argument("--parent-id", default=None)
    parser.add_argument("--settings-dir", default=".", help="Directory holding settings.json")
    parser.add_argument("--api-base-url", default=None)
    parser.add_argument("--stream-url", default=None)
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--debug", action="store_true", default=None)
    parser.add_argument("--demo", action="store_true", help="Use in-memory adapters")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> SettingsConfig:
    settings = StorageLocal(args.settings_dir).load_settings()
    return settings.merged(
        {
            "api_base_url": args.api_base_url,
            "stream_url": args.stream_url,
            "api_key": args.api_key,
            "debug_logging": args.debug,
        }
    )


async def _wait_for_shutdown() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    await stop.wait()


async def run_live(settings: SettingsConfig, parent_id: str) -> None:
    controller = AppController(settings)
    if not controller.ensure_ready():
        raise SystemExit("api_base_url and stream_url must be configured (settings.json or flags).")
    panel = controller.create_panel(parent_id, on_rows_changed=_log_rows)
    try:
        await panel.start()
        await _wait_for_shutdown()
    finally:
        await panel.stop()
        await controller.aclose()


async def run_demo(settings: SettingsConfig) -> LineItemsPanel:
    """Scripted offline session; returns the stopped panel for inspection."""
    push = PushChannelMock()
    records = RecordsMock(
        elevated=True,
        push=push,
        channel_name=settings.channel_name,
        parent_id_field=settings.parent_id_field,
    )
    records.add_item(_DEMO_PARENT, {
        "Id": "LI-1", "Quantity": 5, "UnitPrice": 120.0,
        "Product2": {"Id": "P-1", "Name": "Laptop Pro", "QuantityInStock__c": 3},
    })
    records.add_item(_DEMO_PARENT, {
        "Id": "LI-2", "Quantity": 2, "UnitPrice": 15.5,
        "Product2": {"Id": "P-2", "Name": "USB-C Cable", "QuantityInStock__c": 40},
    })

    controller = AppController(settings, records=records, push=push, navigator=LoggingNavigator())
    panel = controller.create_panel(_DEMO_PARENT, on_rows_changed=_log_rows)
    await panel.start()
    log.info("Stock warning: %s", panel.has_stock_warning)

    # Change made outside this session, announced through the push channel.
    records.add_item(_DEMO_PARENT, {
        "Id": "LI-3", "Quantity": 1, "UnitPrice": 299.0,
        "Product2": {"Id": "P-3", "Name": "Docking Station", "QuantityInStock__c": 7},
    })
    await push.publish(settings.channel_name, {"data": {"payload": {settings.parent_id_field: _DEMO_PARENT}}})

    await panel.handle_row_action(ACTION_VIEW, "LI-2")
    await panel.handle_row_action(ACTION_DELETE, "LI-1")
    await panel.stop()
    return panel


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint for the console host."""
    args = _parse_args(argv)
    logging_utils.configure_root()
    settings = load_settings(args)
    logging_utils.apply_preferences(settings.debug_logging)

    if args.demo:
        asyncio.run(run_demo(settings))
        return
    if not args.parent_id:
        raise SystemExit("--parent-id is required unless --demo is given.")
    asyncio.run(run_live(settings, args.parent_id))


if __name__ == "__main__":
    main()
