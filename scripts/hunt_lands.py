#!/usr/bin/env python3
"""Print the current best raid targets.

Runs one ingestion cycle (bulk, or faction-scoped with ``--faction``),
optionally waits for rate-limited enrichment to finish, and prints the
selected lands as a table or JSON.

Usage
-----
::

    python scripts/hunt_lands.py
    python scripts/hunt_lands.py --wait --limit 25
    python scripts/hunt_lands.py --faction 0xabc... --json

Configuration is read from ``LAND_HUNTER_*`` environment variables (see
:meth:`landhunter.HunterConfig.from_env`).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from landhunter import HunterConfig, LandHunterClient, LandHunterError, LandRecord  # noqa: E402


def _land_row(land: LandRecord, prefer_refined: bool) -> dict[str, Any]:
    return {
        "tile_id": land.tile_id,
        "url": f"https://liquidlands.io/land/{land.tile_id}",
        "country": land.country.upper() if land.country else "",
        "reward": land.display_reward(prefer_refined),
        "refined": land.is_refined,
        "bricks_per_day": land.production_rate_per_day,
        "defense": land.defense,
    }


def _format_table(rows: list[dict[str, Any]]) -> str:
    header = f"{'Land':>8}  {'Country':<7}  {'Max Raid Reward':>15}  {'Bricks/Day':>10}  {'Defense':>7}"
    lines = [header, "-" * len(header)]
    for row in rows:
        reward = f"{row['reward']:.6f}" + ("" if row["refined"] else "*")
        defense = "" if row["defense"] is None else f"{row['defense']:g}"
        lines.append(
            f"{row['tile_id']:>8}  {row['country']:<7}  {reward:>15}  {row['bricks_per_day']:>10.3f}  {defense:>7}"
        )
    lines.append("(* provisional estimate)")
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> int:
    config = HunterConfig.from_env()
    async with LandHunterClient(config) as client:
        try:
            if args.faction:
                report = await client.hunt_faction(args.faction)
            else:
                report = await client.refresh()
        except LandHunterError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        print(
            f"generation {report.generation}: {report.kept} lands, {report.submitted} detail calls queued",
            file=sys.stderr,
        )
        if args.wait:
            await client.wait_for_enrichment()

        lands = client.select_lands(limit=args.limit if args.limit is not None else config.display_limit)
        rows = [_land_row(land, config.prefer_refined_reward) for land in lands]

        error = client.visible_error
        if error:
            print(f"Error: {error}", file=sys.stderr)

    if args.json:
        print(json.dumps(rows, indent=2))
    else:
        print(_format_table(rows))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Show the best lands to raid.")
    parser.add_argument("--faction", metavar="ADDRESS", help="Only hunt tiles of this faction")
    parser.add_argument("--wait", action="store_true", help="Wait for all detail calls before printing")
    parser.add_argument("--limit", type=int, default=None, help="Number of lands to show")
    parser.add_argument("--json", action="store_true", help="Output as machine-readable JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
