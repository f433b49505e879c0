"""Phone number -> geographic profile resolution.

Resolution is best effort and never raises on bad input: an unknown prefix
simply leaves the corresponding profile fields empty.
"""

import re
from collections import Counter
from functools import lru_cache
from typing import Iterable, Mapping

import structlog
from pydantic import BaseModel

from leadintel.config import settings
from leadintel.geo.tables import (
    AreaCodeEntry,
    CountryCodeEntry,
    GeoTableError,
    load_area_codes,
    load_country_codes,
)

logger = structlog.get_logger()

MAX_CALLING_CODE_DIGITS = 4

_NON_DIGITS = re.compile(r"[^0-9]")
_FIRST_SIGNIFICANT = re.compile(r"[0-9+]")
_UTC_OFFSET = re.compile(r"UTC([+-])([0-9]{1,2})(?::([0-9]{2}))?")


class GeoProfile(BaseModel):
    area_code: str | None = None
    country_calling_code: str | None = None
    state_code: str | None = None
    city_name: str | None = None
    country: str | None = None
    continent: str | None = None
    region: str | None = None
    timezone: str | None = None
    state_full_name: str | None = None

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())

    def to_lead_fields(self) -> dict:
        """Flatten onto the Lead record's geo columns."""
        return {
            "ddd": self.area_code,
            "ddi": self.country_calling_code,
            "estado": self.state_code,
            "cidade": self.city_name,
            "pais": self.country,
            "continente": self.continent,
            "regiao": self.region,
        }


class GeoDistribution(BaseModel):
    by_state: dict[str, int] = {}
    by_country: dict[str, int] = {}
    by_region: dict[str, int] = {}
    by_continent: dict[str, int] = {}


class ContactWindow(BaseModel):
    start: str
    end: str


class ContactWindows(BaseModel):
    timezone: str | None
    utc_offset_minutes: int | None
    morning: ContactWindow = ContactWindow(start="09:00", end="12:00")
    afternoon: ContactWindow = ContactWindow(start="14:00", end="17:00")
    evening: ContactWindow = ContactWindow(start="17:00", end="20:00")


def normalize_phone(raw: str | None) -> str:
    """Keep digits only, plus a '+' when it is the first digit-or-plus character."""
    if not raw:
        return ""
    digits = _NON_DIGITS.sub("", raw)
    first = _FIRST_SIGNIFICANT.search(raw)
    if first and first.group() == "+":
        return "+" + digits
    return digits


def parse_utc_offset(timezone: str | None) -> int | None:
    """'UTC-3' -> -180, 'UTC+5:30' -> 330; None when unparsable."""
    if not timezone:
        return None
    match = _UTC_OFFSET.fullmatch(timezone.strip())
    if not match:
        return None
    sign, hours, minutes = match.groups()
    total = int(hours) * 60 + int(minutes or 0)
    return -total if sign == "-" else total


class GeoResolver:
    """Classifies raw phone numbers using an area code and a calling code table.

    Numbers starting with '+' are matched against the calling code table,
    longest candidate first. Only the home country gets compound resolution
    (calling code, then area code on the remainder); every other country
    resolves to country-level fields. Numbers without '+' are treated as
    domestic numbers of the home country.
    """

    def __init__(
        self,
        area_codes: Mapping[str, AreaCodeEntry],
        country_codes: Mapping[str, CountryCodeEntry],
        home_calling_code: str = "+55",
    ):
        if home_calling_code not in country_codes:
            raise GeoTableError(f"Home calling code {home_calling_code} missing from the calling code table")
        self._area_codes = area_codes
        self._country_codes = country_codes
        self.home_calling_code = home_calling_code
        self._home = country_codes[home_calling_code]

    def resolve(self, raw_phone: str | None) -> GeoProfile:
        normalized = normalize_phone(raw_phone)
        if normalized.startswith("+"):
            fields = self._resolve_international(normalized)
        else:
            fields = self._resolve_domestic(normalized)
        return GeoProfile(**fields)

    def match_country_code(self, normalized: str) -> tuple[str, CountryCodeEntry] | None:
        """Longest calling code prefix of a normalized '+' number, if any."""
        if not normalized.startswith("+"):
            return None
        for length in range(MAX_CALLING_CODE_DIGITS, 0, -1):
            candidate = normalized[: length + 1]
            if len(candidate) != length + 1:
                continue
            entry = self._country_codes.get(candidate)
            if entry is not None:
                return candidate, entry
        return None

    def _resolve_international(self, normalized: str) -> dict:
        match = self.match_country_code(normalized)
        if match is None:
            return {}
        code, entry = match
        fields = {
            "country_calling_code": code,
            "country": entry.country,
            "continent": entry.continent,
            "timezone": entry.timezone,
        }
        if code == self.home_calling_code:
            fields.update(self._match_area_code(normalized[len(code):]))
        return fields

    def _resolve_domestic(self, digits: str) -> dict:
        fields = self._match_area_code(digits)
        if fields:
            fields["country"] = self._home.country
            fields["continent"] = self._home.continent
        return fields

    def _match_area_code(self, digits: str) -> dict:
        area_code = digits[:2]
        entry = self._area_codes.get(area_code)
        if entry is None:
            return {}
        return {
            "area_code": area_code,
            "state_code": entry.state_code,
            "city_name": entry.city_name,
            "region": entry.region,
            "state_full_name": entry.state_full_name,
        }

    def is_valid_domestic_number(self, raw_phone: str | None) -> bool:
        """Strict check: 10 or 11 digits starting with a known area code."""
        digits = _NON_DIGITS.sub("", raw_phone or "")
        return len(digits) in (10, 11) and digits[:2] in self._area_codes

    def format_domestic(self, raw_phone: str) -> str:
        """(AA) NNNN-NNNN or (AA) NNNNN-NNNN; anything else is returned untouched."""
        digits = _NON_DIGITS.sub("", raw_phone or "")
        if len(digits) == 11:
            return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
        if len(digits) == 10:
            return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
        return raw_phone

    def distribution(self, phones: Iterable[str | None]) -> GeoDistribution:
        by_state, by_country, by_region, by_continent = Counter(), Counter(), Counter(), Counter()
        for phone in phones:
            profile = self.resolve(phone)
            if profile.state_code:
                by_state[profile.state_code] += 1
            if profile.country:
                by_country[profile.country] += 1
            if profile.region:
                by_region[profile.region] += 1
            if profile.continent:
                by_continent[profile.continent] += 1
        return GeoDistribution(
            by_state=dict(by_state),
            by_country=dict(by_country),
            by_region=dict(by_region),
            by_continent=dict(by_continent),
        )

    def area_codes_by_region(self, region: str) -> list[str]:
        return sorted(code for code, entry in self._area_codes.items() if entry.region == region)

    def countries_by_continent(self, continent: str) -> list[str]:
        return sorted({entry.country for entry in self._country_codes.values() if entry.continent == continent})

    def best_contact_windows(self, timezone: str | None) -> ContactWindows:
        # Windows are business hours in the lead's own local time
        return ContactWindows(timezone=timezone, utc_offset_minutes=parse_utc_offset(timezone))


@lru_cache
def get_geo_resolver() -> GeoResolver:
    """Process-wide resolver built from the configured tables."""
    area_codes = load_area_codes(settings.area_codes_path)
    country_codes = load_country_codes(settings.country_codes_path)
    logger.info("geo_tables_loaded", area_codes=len(area_codes), country_codes=len(country_codes))
    return GeoResolver(area_codes, country_codes, settings.home_calling_code)
