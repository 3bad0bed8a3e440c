"""Data models for reachable station collection."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Origin(CamelModel):
    """A fixed starting point from which reachability is measured."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display label, e.g. '茅場町'")
    node: str = Field(..., description="Routing service node id")

    def __str__(self) -> str:
        return f"{self.name} ({self.node})"


class TimeBand(CamelModel):
    """A contiguous minute-range bucket used to batch queries."""

    model_config = ConfigDict(frozen=True)

    lower: int = Field(..., description="Lower bound in minutes")
    higher: int = Field(..., description="Upper bound in minutes")

    @model_validator(mode="after")
    def _check_bounds(self) -> "TimeBand":
        if self.lower < 0 or self.lower >= self.higher:
            raise ValueError(
                f"Invalid time band {self.lower}-{self.higher}: need 0 <= lower < higher"
            )
        return self

    @property
    def label(self) -> str:
        return f"{self.lower}-{self.higher}"

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, label: str) -> "TimeBand":
        """Parse a band label such as '10-20'.

        Raises:
            ValidationError: If the label is not of the form '<lower>-<higher>'
        """
        parts = label.strip().split("-") if isinstance(label, str) else []
        if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
            raise ValidationError(f"Invalid time band label: {label!r}")
        lower, higher = int(parts[0]), int(parts[1])
        if lower >= higher:
            raise ValidationError(f"Invalid time band label: {label!r}")
        return cls(lower=lower, higher=higher)


class Coord(CamelModel):
    """Geographic coordinate."""

    lat: float
    lon: float


class FlatRow(CamelModel):
    """One direct-reachability observation for (origin, band, line, station)."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Origin display name")
    target_node: str = Field(..., description="Origin node id")
    time_range: TimeBand = Field(..., description="Requested band")
    time_band: str = Field(..., description="Requested band label, e.g. '20-30'")
    line: str = Field(..., description="Railway line name")
    line_id: str | None = Field(None, description="Railway line id")
    line_color: str | None = Field(None, description="Railway line color")
    station_id: str = Field(..., description="Station node id")
    station_name: str = Field(..., description="Station name")
    time_minutes: int = Field(..., description="Minutes from origin")
    transit_count: int = Field(..., description="Number of transfers")
    rough_address: str = Field("", description="Raw address text")
    pref: str | None = Field(None, description="Prefecture parsed from address")
    city_ward: str | None = Field(None, description="City/ward parsed from address")
    coord: Coord | None = Field(None, description="Station coordinate")


class ReachableInfo(CamelModel):
    """Best known direct route from one origin to a station."""

    target: str
    target_node: str
    time_band: str
    time_minutes: int
    transit_count: int = 0
    line: str

    @property
    def band_lower(self) -> int:
        return TimeBand.parse(self.time_band).lower

    @classmethod
    def from_row(cls, row: FlatRow) -> "ReachableInfo":
        return cls(
            target=row.target,
            target_node=row.target_node,
            time_band=row.time_band,
            time_minutes=row.time_minutes,
            transit_count=row.transit_count,
            line=row.line,
        )

    def __str__(self) -> str:
        return f"{self.target} {self.time_minutes}分 ({self.line}, {self.time_band})"


class LineMeta(CamelModel):
    """Identifier and display color of a railway line."""

    id: str | None = None
    color: str | None = None


class StationRecord(CamelModel):
    """Aggregated record for one station.

    ``lines`` keeps first-seen order and never holds duplicates; add lines
    through :meth:`add_line` only. ``reachable`` holds at most one entry per
    origin node.
    """

    station_id: str
    station_name: str
    rough_address: str = ""
    pref: str | None = None
    city_ward: str | None = None
    coord: Coord | None = None
    lines: list[str] = Field(default_factory=list)
    line_meta: dict[str, LineMeta] = Field(default_factory=dict)
    reachable: dict[str, ReachableInfo] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: FlatRow) -> "StationRecord":
        return cls(
            station_id=row.station_id,
            station_name=row.station_name,
            rough_address=row.rough_address,
            pref=row.pref,
            city_ward=row.city_ward,
            coord=row.coord,
        )

    def fill_missing(self, row: FlatRow) -> None:
        """Fill still-empty coordinate/address fields from ``row``."""
        if self.coord is None and row.coord is not None:
            self.coord = row.coord
        if not self.rough_address and row.rough_address:
            self.rough_address = row.rough_address
            self.pref = row.pref
            self.city_ward = row.city_ward

    def add_line(
        self, line: str, line_id: str | None = None, line_color: str | None = None
    ) -> None:
        if line not in self.lines:
            self.lines.append(line)
        self.line_meta[line] = LineMeta(id=line_id, color=line_color)

    def __str__(self) -> str:
        return self.station_name


class TargetIndexEntry(CamelModel):
    """Per-origin ledger of stations observed in each band."""

    target: str
    target_node: str
    time_bands: dict[str, list[str]] = Field(default_factory=dict)

    def record(self, band: str, station_id: str) -> None:
        members = self.time_bands.setdefault(band, [])
        if station_id not in members:
            members.append(station_id)


class RunSource(CamelModel):
    """Run configuration recorded alongside the results."""

    transit_limit: int
    first_train: bool
    express_train: bool
    targets: list[Origin]
    ranges: list[TimeBand]


class StructuredOutput(CamelModel):
    """Top-level persisted snapshot of one collection run."""

    generated_at: datetime
    source: RunSource
    stations_by_id: dict[str, StationRecord] = Field(default_factory=dict)
    targets_index: dict[str, TargetIndexEntry] = Field(default_factory=dict)


# --- Routing service response shapes (only the fields we extract) ---


class ApiNodeDetail(BaseModel):
    address_name: str | None = None


class ApiStation(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    time: int
    coord: Coord | None = None
    name: str
    node_id: str
    transit_count: int
    node_detail: ApiNodeDetail | None = None


class ApiLink(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    link_id: str
    link_name: str
    link_color: str | None = None
    stations: list[ApiStation] = Field(default_factory=list)

    @field_validator("stations", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ApiResponse(BaseModel):
    links: list[ApiLink] = Field(default_factory=list)

    @field_validator("links", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
