from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Target field catalogue for each import kind.

Every import kind (wards, polling booths, constituencies) owns a fixed, ordered
tuple of TargetField descriptors. The order is the declaration order used by the
validator when it reports errors, and by the CLI when it renders the mapping form.

Value rules are attached per field key (latitude, voter counts, ...) rather than
derived from a generic column type.
"""

__all__ = [
    "FieldRule",
    "ImportKind",
    "TargetField",
    "WARD_FIELDS",
    "BOOTH_FIELDS",
    "CONSTITUENCY_FIELDS",
    "fields_for",
    "default_table_for",
]


class FieldRule(Enum):
    """Value rule applied to a present (non-empty) cell."""
    TEXT = "text"  # 制約なし
    LATITUDE = "latitude"  # finite number in [-90, 90]
    LONGITUDE = "longitude"  # finite number in [-180, 180]
    COUNT = "count"  # non-negative whole number
    MEASURE = "measure"  # finite non-negative number
    CHOICE = "choice"  # one of TargetField.choices (case-insensitive)


class ImportKind(Enum):
    """Entity type an upload session imports into."""
    WARDS = "wards"
    BOOTHS = "booths"
    CONSTITUENCIES = "constituencies"


@dataclass(frozen=True)
class TargetField:
    """Predefined destination column of the entity being imported."""
    key: str  # DB column name (e.g. ward_code)
    label: str  # Human readable label used in error messages
    required: bool = False
    rule: FieldRule = FieldRule.TEXT
    choices: tuple[str, ...] | None = None  # CHOICE rule only


WARD_FIELDS: tuple[TargetField, ...] = (
    TargetField("ward_code", "Ward Code", required=True),
    TargetField("ward_name", "Ward Name", required=True),
    TargetField("constituency_code", "Constituency Code", required=True),
    TargetField("constituency_name", "Constituency Name", required=True),
    TargetField("district", "District"),
    TargetField("population", "Population", rule=FieldRule.COUNT),
    TargetField("area_sqkm", "Area (sq km)", rule=FieldRule.MEASURE),
)

BOOTH_FIELDS: tuple[TargetField, ...] = (
    TargetField("booth_code", "Booth Code", required=True),
    TargetField("booth_name", "Booth Name", required=True),
    TargetField("ward_code", "Ward Code", required=True),
    TargetField("constituency_code", "Constituency Code", required=True),
    TargetField("address", "Address"),
    TargetField("latitude", "Latitude", rule=FieldRule.LATITUDE),
    TargetField("longitude", "Longitude", rule=FieldRule.LONGITUDE),
    TargetField("total_voters", "Total Voters", rule=FieldRule.COUNT),
    TargetField("male_voters", "Male Voters", rule=FieldRule.COUNT),
    TargetField("female_voters", "Female Voters", rule=FieldRule.COUNT),
    TargetField("transgender_voters", "Transgender Voters", rule=FieldRule.COUNT),
    TargetField("accessibility", "Accessibility"),
)

CONSTITUENCY_FIELDS: tuple[TargetField, ...] = (
    TargetField("code", "Constituency Code", required=True),
    TargetField("name", "Constituency Name", required=True),
    TargetField("number", "Constituency Number", required=True, rule=FieldRule.COUNT),
    TargetField("district", "District"),
    TargetField(
        "constituency_type",
        "Constituency Type",
        rule=FieldRule.CHOICE,
        choices=("assembly", "parliamentary"),
    ),
    TargetField(
        "reserved_for",
        "Reserved For",
        rule=FieldRule.CHOICE,
        choices=("general", "sc", "st"),
    ),
    TargetField("total_voters", "Total Voters", rule=FieldRule.COUNT),
    TargetField("total_wards", "Total Wards", rule=FieldRule.COUNT),
    TargetField("total_booths", "Total Booths", rule=FieldRule.COUNT),
    TargetField("area_sq_km", "Area (sq km)", rule=FieldRule.MEASURE),
    TargetField("center_lat", "Center Latitude", rule=FieldRule.LATITUDE),
    TargetField("center_lng", "Center Longitude", rule=FieldRule.LONGITUDE),
)

_FIELDS_BY_KIND: dict[ImportKind, tuple[TargetField, ...]] = {
    ImportKind.WARDS: WARD_FIELDS,
    ImportKind.BOOTHS: BOOTH_FIELDS,
    ImportKind.CONSTITUENCIES: CONSTITUENCY_FIELDS,
}

_DEFAULT_TABLES: dict[ImportKind, str] = {
    ImportKind.WARDS: "wards",
    ImportKind.BOOTHS: "polling_booths",
    ImportKind.CONSTITUENCIES: "constituencies",
}


def fields_for(kind: ImportKind) -> tuple[TargetField, ...]:
    return _FIELDS_BY_KIND[kind]


def default_table_for(kind: ImportKind) -> str:
    return _DEFAULT_TABLES[kind]
