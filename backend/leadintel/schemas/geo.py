"""Geo lookup response schemas."""

from pydantic import BaseModel

from leadintel.geo.resolver import GeoProfile


class PhoneLookupResponse(BaseModel):
    phone: str
    normalized: str
    valid_domestic: bool
    profile: GeoProfile


class PhoneFormatResponse(BaseModel):
    phone: str
    formatted: str
    valid_domestic: bool
