from pydantic import BaseModel, ConfigDict, Field


class HospitalListQuery(BaseModel):
    city: str | None = None
    query: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    geolocation_error: str | None = None


class HospitalInput(BaseModel):
    """Admin form input.

    Every field is optional here; required-field and format rules are
    checked by the admin service so that the form gets one list of
    messages. ``facilities`` and ``services`` accept comma separated text.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    type: str | None = None
    hospital_class: str | None = Field(default=None, alias="class")
    address: str | None = None
    city: str | None = None
    district: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    image: str | None = None
    description: str | None = None
    facilities: list[str] | str | None = None
    services: list[str] | str | None = None
    total_beds: int | None = Field(default=None, ge=0)
    has_igd: bool | None = None
    has_icu: bool | None = None
    operating_hours: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    google_maps_link: str | None = None
