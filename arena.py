"""
Command line access to an Arena library catalog.

The script will:
    1. Read the portal URL and card credentials from the environment (or `.env`).
    2. Run the requested catalog or account operation.
    3. Print the result as JSON, or a one-line error message.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List

import requests

from arena_classes import ArenaError, AuthenticationFailed
from arena_classes.config import ArenaConfig, load_config
from arena_classes.data_models.account import Account
from arena_classes.data_models.search import SearchQuery
from arena_classes.logger import setup_logger
from arena_classes.repositories.fetcher import PageFetcher
from arena_classes.services.account import AccountService
from arena_classes.services.catalog import CatalogService


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Arena catalog client")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("fields", help="List the fields of the extended search")

    search = commands.add_parser("search", help="Search the catalog")
    search.add_argument("queries", nargs="+", metavar="FIELD=VALUE")
    search.add_argument("--page", type=int, default=1, help="Result page to show")

    detail = commands.add_parser("detail", help="Show one record")
    detail.add_argument("item_id")

    commands.add_parser("account", help="Show fees, loans and reservations")

    reserve = commands.add_parser("reserve", help="Reserve an item")
    reserve.add_argument("item_id")
    reserve.add_argument("--branch", default=None, help="Pickup branch key")

    renew = commands.add_parser("renew", help="Renew a loan")
    renew.add_argument("media")

    cancel = commands.add_parser("cancel", help="Cancel a reservation")
    cancel.add_argument("media")

    return parser.parse_args(argv)


def parse_queries(raw: List[str]) -> List[SearchQuery]:
    queries = []
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep:
            raise SystemExit(f"Expected FIELD=VALUE, got {item!r}")
        queries.append(SearchQuery(key=key, value=value.strip()))
    return queries


def account_from(config: ArenaConfig) -> Account:
    if not config.username or not config.password:
        raise SystemExit("ARENA_USERNAME and ARENA_PASSWORD are required for account commands.")
    return Account(id=config.username, name=config.username, password=config.password)


def run(args: argparse.Namespace, config: ArenaConfig, fetcher: PageFetcher) -> object:
    if args.command in ("fields", "search", "detail"):
        catalog = CatalogService(config, fetcher=fetcher)
        if args.command == "fields":
            return [field.to_dict() for field in catalog.get_search_fields()]
        if args.command == "detail":
            return catalog.get_result_by_id(args.item_id).to_dict()
        result = catalog.search(parse_queries(args.queries))
        if args.page != 1:
            result = catalog.search_get_page(args.page)
        return result.to_dict()

    service = AccountService(config, account_from(config), fetcher=fetcher)
    if args.command == "account":
        return service.account().to_dict()
    if args.command == "reserve":
        outcome = service.reservation(args.item_id, args.branch)
    elif args.command == "renew":
        outcome = service.prolong(args.media)
    else:
        outcome = service.cancel(args.media)
    return {"status": outcome.status.value, **outcome.to_dict()}


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config()
    setup_logger(config.log_dir, config.log_level)
    fetcher = PageFetcher(timeout=config.timeout, encoding=config.encoding)

    try:
        print(json.dumps(run(args, config, fetcher), indent=2, ensure_ascii=False))
    except AuthenticationFailed as e:
        print(f"Login failed: {e}", file=sys.stderr)
        return 1
    except ArenaError as e:
        print(f"Unexpected catalog page: {e}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"Catalog not reachable: {e}", file=sys.stderr)
        return 1
    finally:
        fetcher.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
