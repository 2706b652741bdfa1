"""
nearshop CLI entrypoint.

This CLI is intended for quick local demos and debugging of the location
search pipeline without a UI: autocomplete, place resolution, reverse
geocoding and shop ranking.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from nearshop.config.settings import Settings, get_settings
from nearshop.core.env import resolve_project_path
from nearshop.core.errors import LocationSearchError
from nearshop.core.geo import GeoPoint
from nearshop.core.http import build_async_client
from nearshop.core.logging import configure_logging
from nearshop.directory.shop_directory import ShopDirectoryClient, shop_locations_from_records
from nearshop.domain.models import RankedShop, ResolvedAddress
from nearshop.geocoding.autocomplete import PlaceAutocompleteClient
from nearshop.geocoding.place_details import PlaceResolver
from nearshop.geocoding.reverse_geocode import ReverseGeocoder
from nearshop.ranking.display import format_distance, format_location_label, nearest
from nearshop.ranking.proximity import rank

T = TypeVar("T")


def _run(settings: Settings, call: Callable[[httpx.AsyncClient], Awaitable[T]]) -> T:
    """Run one command's coroutine with a client that is closed afterwards."""

    async def runner() -> T:
        async with build_async_client(timeout_seconds=settings.app.http_timeout_seconds) as client:
            return await call(client)

    return asyncio.run(runner())


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _load_shop_records(path: str) -> list[Any]:
    """Read shops from a JSON file: either a list or a `{"data": [...]}` page."""
    data = json.loads(resolve_project_path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of shops or an object with a 'data' list")
    return data


def _cmd_suggest(args: argparse.Namespace) -> int:
    settings = get_settings()
    predictions = _run(
        settings, lambda client: PlaceAutocompleteClient(settings, client=client).fetch_predictions(args.query)
    )

    if args.json:
        _print_json([p.model_dump(mode="json") for p in predictions])
        return 0

    if not predictions:
        print("No predictions.")
    for p in predictions:
        print(f"{p.place_id}  {p.main_text}  {p.secondary_text}".rstrip())
    return 0


def _print_address(resolved: ResolvedAddress, *, as_json: bool) -> None:
    if as_json:
        _print_json(resolved.model_dump(mode="json"))
        return
    print(resolved.formatted_address or "(no formatted address)")
    print(f"  {format_location_label(resolved.city, resolved.province)}")
    print(f"  lat={resolved.point.lat:.6f} lng={resolved.point.lng:.6f}")


def _cmd_resolve(args: argparse.Namespace) -> int:
    settings = get_settings()
    resolved = _run(settings, lambda client: PlaceResolver(settings, client=client).resolve(args.place_id))
    _print_address(resolved, as_json=args.json)
    return 0


def _cmd_reverse(args: argparse.Namespace) -> int:
    settings = get_settings()
    point = GeoPoint(lat=float(args.lat), lng=float(args.lng))
    resolved = _run(settings, lambda client: ReverseGeocoder(settings, client=client).reverse_geocode(point))
    _print_address(resolved, as_json=args.json)
    return 0


def _print_ranking(ranked: list[RankedShop], *, as_json: bool) -> None:
    if as_json:
        _print_json([r.model_dump(mode="json") for r in ranked])
        return
    closest = nearest(ranked)
    for i, item in enumerate(ranked, start=1):
        marker = "*" if item is closest else " "
        print(f"{i:>2}.{marker}{item.id}  {format_distance(item.distance_km)}")


def _cmd_rank(args: argparse.Namespace) -> int:
    shops = shop_locations_from_records(_load_shop_records(args.shops))
    reference = GeoPoint(lat=float(args.lat), lng=float(args.lng))
    _print_ranking(rank(reference, shops), as_json=args.json)
    return 0


def _cmd_nearby(args: argparse.Namespace) -> int:
    settings = get_settings()
    shops = _run(
        settings,
        lambda client: ShopDirectoryClient(settings, client=client).list_shops(
            page=int(args.page), limit=args.limit
        ),
    )
    reference = GeoPoint(lat=float(args.lat), lng=float(args.lng))
    _print_ranking(rank(reference, shops), as_json=args.json)
    return 0


def _add_point_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", required=True, type=float)
    parser.add_argument("--lng", required=True, type=float)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the nearshop CLI."""
    parser = argparse.ArgumentParser(prog="nearshop")
    parser.add_argument("--log-level", default=None, help="Override app.log_level (e.g. DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    sug = sub.add_parser("suggest", help="Autocomplete predictions for a partial address.")
    sug.add_argument("query")
    sug.set_defaults(func=_cmd_suggest)

    res = sub.add_parser("resolve", help="Resolve a prediction's place_id to a coordinate and address.")
    res.add_argument("place_id")
    res.set_defaults(func=_cmd_resolve)

    rev = sub.add_parser("reverse", help="Reverse geocode a coordinate.")
    _add_point_args(rev)
    rev.set_defaults(func=_cmd_reverse)

    rk = sub.add_parser("rank", help="Rank shops from a local JSON file by distance.")
    _add_point_args(rk)
    rk.add_argument("--shops", required=True, help="JSON file with shop records (id, latitude, longitude)")
    rk.set_defaults(func=_cmd_rank)

    nb = sub.add_parser("nearby", help="Fetch shops from the directory API and rank them by distance.")
    _add_point_args(nb)
    nb.add_argument("--page", type=int, default=1)
    nb.add_argument("--limit", type=int, default=None)
    nb.set_defaults(func=_cmd_nearby)

    for cmd in (sug, res, rev, rk, nb):
        cmd.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m nearshop.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except LocationSearchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
