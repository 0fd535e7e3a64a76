"""Per-land detail endpoint."""

from __future__ import annotations

from pydantic import ValidationError

from landhunter._api._common import raise_for_message, require_dict
from landhunter._constants import DETAIL_ENDPOINT
from landhunter._transport import Transport
from landhunter.config import HunterConfig
from landhunter.exceptions import LandMalformedResponseError
from landhunter.models.detail import LandDetail
from landhunter.models.requests import DetailRequest


async def fetch_land_detail(config: HunterConfig, transport: Transport, tile_id: int) -> LandDetail:
    """Fetch authoritative detail for *tile_id*.

    Raises
    ------
    LandTransportError
        Network failure, non-200 status or invalid JSON.
    LandMalformedResponseError
        The body is not a JSON object.
    LandApiError
        The API reported a non-success status message.
    """
    payload = DetailRequest.for_tile(config, tile_id).to_payload()
    decoded = require_dict(await transport.post_json(DETAIL_ENDPOINT, payload), endpoint=DETAIL_ENDPOINT)
    try:
        detail = LandDetail.model_validate(decoded)
    except ValidationError as exc:
        raise LandMalformedResponseError(
            f"{DETAIL_ENDPOINT} response for tile {tile_id} did not validate: {exc.error_count()} errors",
            endpoint=DETAIL_ENDPOINT,
        ) from exc
    raise_for_message(detail.message, endpoint=DETAIL_ENDPOINT)
    return detail
