"""Faction-scoped tile listing endpoint."""

from __future__ import annotations

import logging
from urllib.parse import quote

from landhunter._api._common import require_list
from landhunter._constants import FACTION_TILES_ENDPOINT
from landhunter._transport import Transport
from landhunter.ingestion.normalize import safe_int

_logger = logging.getLogger(__name__)


async def fetch_faction_tiles(transport: Transport, address: str) -> list[int]:
    """Fetch candidate tile ids held by the faction at *address*.

    Ids are de-duplicated while preserving order; non-numeric items are skipped.
    """
    endpoint = FACTION_TILES_ENDPOINT.format(address=quote(address.strip(), safe=""))
    decoded = require_list(await transport.get_json(endpoint), endpoint=endpoint)

    seen: set[int] = set()
    tile_ids: list[int] = []
    for item in decoded:
        tile_id = safe_int(item)
        if tile_id is None:
            _logger.debug("Skipping non-numeric tile id %r from %s", item, endpoint)
            continue
        if tile_id not in seen:
            seen.add(tile_id)
            tile_ids.append(tile_id)
    return tile_ids
