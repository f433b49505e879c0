"""Geo reference tables - domestic area codes and international calling codes.

The tables are data, not logic: they ship as YAML next to this module and can
be swapped for other files through settings (``area_codes_path`` and
``country_codes_path``). Loading validates every key and entry so that the
resolver can trust what it is handed.
"""

import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml
from pydantic import BaseModel, ValidationError as PydanticValidationError

DATA_DIR = Path(__file__).parent / "data"
AREA_CODES_FILE = DATA_DIR / "area_codes.yaml"
COUNTRY_CODES_FILE = DATA_DIR / "country_codes.yaml"

AREA_CODE_KEY = re.compile(r"[0-9]{2}")
CALLING_CODE_KEY = re.compile(r"\+[0-9]{1,4}")


class GeoTableError(RuntimeError):
    """Raised when a reference table is missing or malformed."""


class AreaCodeEntry(BaseModel):
    state_code: str
    city_name: str
    region: str
    state_full_name: str

    model_config = {"frozen": True}


class CountryCodeEntry(BaseModel):
    country: str
    continent: str
    timezone: str | None = None
    language: str | None = None

    model_config = {"frozen": True}


def _read_yaml(path: str | Path) -> dict:
    file_path = Path(path)
    if not file_path.exists():
        raise GeoTableError(f"Geo table '{file_path}' was not found")
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise GeoTableError(f"Geo table '{file_path}' is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise GeoTableError(f"Geo table '{file_path}' must be a mapping of code -> entry")
    return data


def _build_table(data: dict, key_pattern: re.Pattern, entry_cls: type[BaseModel], label: str) -> Mapping:
    table = {}
    for key, value in data.items():
        # Unquoted YAML keys load as int, which would silently drop leading zeros
        if not isinstance(key, str) or not key_pattern.fullmatch(key):
            raise GeoTableError(f"Invalid {label} key {key!r}")
        try:
            table[key] = entry_cls.model_validate(value)
        except PydanticValidationError as exc:
            raise GeoTableError(f"Invalid {label} entry for {key}: {exc}") from exc
    return MappingProxyType(table)


def load_area_codes(path: str | Path | None = None) -> Mapping[str, AreaCodeEntry]:
    """Load the 2-digit area code table (packaged default when path is None)."""
    data = _read_yaml(path or AREA_CODES_FILE)
    return _build_table(data, AREA_CODE_KEY, AreaCodeEntry, "area code")


def load_country_codes(path: str | Path | None = None) -> Mapping[str, CountryCodeEntry]:
    """Load the '+'-prefixed calling code table (packaged default when path is None)."""
    data = _read_yaml(path or COUNTRY_CODES_FILE)
    return _build_table(data, CALLING_CODE_KEY, CountryCodeEntry, "calling code")
