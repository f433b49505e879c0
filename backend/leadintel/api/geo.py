"""Geo lookup endpoints over the reference tables."""

from fastapi import APIRouter, Depends, Query

from leadintel.api.health import GEO_LOOKUPS
from leadintel.geo import ContactWindows, GeoResolver, get_geo_resolver, normalize_phone
from leadintel.middleware.auth import verify_admin_token
from leadintel.schemas.geo import PhoneFormatResponse, PhoneLookupResponse

router = APIRouter(prefix="/geo", tags=["geo"])


@router.get("/resolve", response_model=PhoneLookupResponse)
def resolve_phone(
    phone: str = Query(..., max_length=50),
    admin: str = Depends(verify_admin_token),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    profile = resolver.resolve(phone)
    GEO_LOOKUPS.labels(outcome="miss" if profile.is_empty() else "hit").inc()
    return PhoneLookupResponse(
        phone=phone,
        normalized=normalize_phone(phone),
        valid_domestic=resolver.is_valid_domestic_number(phone),
        profile=profile,
    )


@router.get("/format", response_model=PhoneFormatResponse)
def format_phone(
    phone: str = Query(..., max_length=50),
    admin: str = Depends(verify_admin_token),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    return PhoneFormatResponse(
        phone=phone,
        formatted=resolver.format_domestic(phone),
        valid_domestic=resolver.is_valid_domestic_number(phone),
    )


@router.get("/regions/{region}/area-codes", response_model=list[str])
def area_codes_for_region(
    region: str,
    admin: str = Depends(verify_admin_token),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    """Area codes of a macro-region, e.g. Sudeste. Unknown regions give []."""
    return resolver.area_codes_by_region(region)


@router.get("/continents/{continent}/countries", response_model=list[str])
def countries_for_continent(
    continent: str,
    admin: str = Depends(verify_admin_token),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    return resolver.countries_by_continent(continent)


@router.get("/contact-windows", response_model=ContactWindows)
def contact_windows(
    timezone: str | None = Query(None, max_length=20),
    admin: str = Depends(verify_admin_token),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    return resolver.best_contact_windows(timezone)
