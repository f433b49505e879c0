from leadintel.geo.resolver import (
    ContactWindows,
    GeoDistribution,
    GeoProfile,
    GeoResolver,
    get_geo_resolver,
    normalize_phone,
)
from leadintel.geo.tables import (
    AreaCodeEntry,
    CountryCodeEntry,
    GeoTableError,
    load_area_codes,
    load_country_codes,
)

__all__ = [
    "AreaCodeEntry", "CountryCodeEntry", "ContactWindows", "GeoDistribution", "GeoProfile",
    "GeoResolver", "GeoTableError", "get_geo_resolver", "load_area_codes", "load_country_codes",
    "normalize_phone",
]
