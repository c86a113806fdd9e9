#!/usr/bin/env python3
"""
Operator console for a supply economy stored on disk.

Runs as the authority against a JSON file store, so it can be used to repair a
bad economy between sessions.

Usage examples:
  - Full reset (new-year randomization followed by one day):
      supply-economy reset --catalog catalog.yaml --state-dir saves/farm_1

  - Advance several days:
      supply-economy advance --days 7 --catalog catalog.yaml --state-dir saves/farm_1

  - Show current prices of one category:
      supply-economy prices --category -75 --catalog catalog.yaml --state-dir saves/farm_1

  - Dump service statistics as JSON:
      supply-economy stats --catalog catalog.yaml --state-dir saves/farm_1
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from supply_economy.config import EconomyConfig, load_config
from supply_economy.core.outcome import Outcome
from supply_economy.event_bus import InMemoryEventBus
from supply_economy.logging import configure_logging, get_logger
from supply_economy.models.catalog import Catalog
from supply_economy.services.economy_service import EconomyService
from supply_economy.services.economy_store.persistence import JsonFileStorageBackend
from supply_economy.services.replication.transport import EventBusTransport


async def _open_service(args: argparse.Namespace, config: EconomyConfig) -> EconomyService:
    backend = JsonFileStorageBackend(args.state_dir)
    await backend.initialize()
    service = EconomyService(
        config=config,
        catalog=Catalog.from_file(args.catalog),
        backend=backend,
        transport=EventBusTransport(InMemoryEventBus()),
        is_authority=True,
        peer_id="operator",
    )
    outcome = await service.on_loaded()
    if not outcome.ok:
        raise RuntimeError(f"Could not load economy: {outcome.error}")
    return service


def _report(name: str, outcome: Outcome) -> int:
    if outcome.ok:
        print(f"{name}: ok (version {outcome.value})")
        return 0
    print(f"{name}: {outcome.status.value} ({outcome.error})", file=sys.stderr)
    return 1


async def _reset(args: argparse.Namespace, service: EconomyService) -> int:
    return _report("reset", await service.full_reset())


async def _advance(args: argparse.Namespace, service: EconomyService) -> int:
    outcome: Outcome = Outcome.skipped("no days requested")
    for _ in range(args.days):
        outcome = await service.advance_one_day()
        if not outcome.ok:
            break
    return _report(f"advance {args.days}", outcome)


async def _prices(args: argparse.Namespace, service: EconomyService) -> int:
    categories = [args.category] if args.category is not None else list(service.get_categories())
    for category in categories:
        print(f"[{category}] {service.catalog.category_name(category)}")
        for record in service.get_items_for_category(category):
            item = service.catalog.item_ref(record.item_id)
            if item is None:
                continue
            price = service.get_price(item, item.list_price)
            print(
                f"  {item.label:<24} supply={record.supply:>5} delta={record.daily_delta:>4} "
                f"price={item.list_price:>5} -> {price:>5}"
            )
    return 0


async def _stats(args: argparse.Namespace, service: EconomyService) -> int:
    print(json.dumps(service.get_statistics(), indent=2))
    return 0


COMMANDS = {"reset": _reset, "advance": _advance, "prices": _prices, "stats": _stats}


async def _run(args: argparse.Namespace, config: EconomyConfig) -> int:
    service = await _open_service(args, config)
    try:
        return await COMMANDS[args.command](args, service)
    finally:
        await service.unload()
        await service.gate.backend.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="supply-economy",
        description="Operator console for the supply economy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="YAML config overlay", default=None)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--catalog", required=True, help="Catalog YAML/JSON file")
    common.add_argument("--state-dir", required=True, help="Directory of the JSON save data")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("reset", parents=[common], help="Randomize for a new year and advance one day")
    advance = sub.add_parser("advance", parents=[common], help="Advance the economy by N days")
    advance.add_argument("--days", type=int, default=1)
    prices = sub.add_parser("prices", parents=[common], help="Print supply and prices")
    prices.add_argument("--category", type=int, default=None)
    sub.add_parser("stats", parents=[common], help="Print service statistics as JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(config.logging)
    try:
        return asyncio.run(_run(args, config))
    except (OSError, ValueError, RuntimeError) as e:
        get_logger("supply_economy.cli").error("Command %s failed: %s", args.command, e, exc_info=True)
        return 1


def cli_main() -> int:
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())
