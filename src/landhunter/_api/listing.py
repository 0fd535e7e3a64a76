"""Bulk land listing endpoint."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from landhunter._api._common import require_list
from landhunter._constants import LISTING_ENDPOINT
from landhunter._transport import Transport
from landhunter.models.land import ListingEntry

_logger = logging.getLogger(__name__)


async def fetch_listing(transport: Transport) -> tuple[list[ListingEntry], int]:
    """Fetch and decode the full land listing.

    Returns a tuple of:
    - decoded entries, in listing order
    - the number of entries skipped because they carried no usable tile id
    """
    decoded = require_list(await transport.get_json(LISTING_ENDPOINT), endpoint=LISTING_ENDPOINT)

    entries: list[ListingEntry] = []
    skipped = 0
    for item in decoded:
        try:
            entries.append(ListingEntry.model_validate(item))
        except ValidationError:
            skipped += 1
            _logger.debug("Skipping undecodable listing entry %r", item)
    return entries, skipped
