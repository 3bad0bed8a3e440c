"""Turn routing service responses into flat reachability rows."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ResponseFormatError
from ..core.models import ApiResponse, FlatRow, Origin, TimeBand
from ..utils.address import parse_address

logger = logging.getLogger(__name__)


def parse_response(payload: Any) -> ApiResponse:
    """Validate the fields we extract from a raw response document.

    Raises:
        ResponseFormatError: If the document does not have the expected shape
    """
    if isinstance(payload, ApiResponse):
        return payload
    if payload is None:
        return ApiResponse()
    try:
        return ApiResponse.model_validate(payload)
    except PydanticValidationError as e:
        raise ResponseFormatError(f"Unexpected reachable response shape: {e}") from e


def normalize_response(payload: Any, origin: Origin, band: TimeBand) -> list[FlatRow]:
    """Extract direct-reachability rows from one (origin, band) response.

    Args:
        payload: Raw JSON document or an already parsed ApiResponse
        origin: Origin the request was issued for
        band: Time band the request was issued for

    Returns:
        One row per (line, station) with a transfer count of exactly zero.
        Stations without a coordinate are kept with ``coord=None``.
    """
    response = parse_response(payload)
    rows: list[FlatRow] = []
    skipped = 0

    for link in response.links:
        for station in link.stations:
            if station.transit_count != 0:
                skipped += 1
                continue

            address = ""
            if station.node_detail and station.node_detail.address_name:
                address = station.node_detail.address_name
            parts = parse_address(address)

            rows.append(
                FlatRow(
                    target=origin.name,
                    target_node=origin.node,
                    time_range=band,
                    time_band=band.label,
                    line=link.link_name,
                    line_id=link.link_id,
                    line_color=link.link_color,
                    station_id=station.node_id,
                    station_name=station.name,
                    time_minutes=station.time,
                    transit_count=station.transit_count,
                    rough_address=address,
                    pref=parts.pref,
                    city_ward=parts.city_ward,
                    coord=station.coord,
                )
            )

    if skipped:
        logger.debug(
            f"Skipped {skipped} stations with transfers for {origin.name} {band.label}"
        )
    return rows
