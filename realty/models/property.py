"""Property record with the defaults used when a listing is created offline."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .base import RecordModel, drop_blank

DEFAULT_IMAGE_URL = (
    "https://images.unsplash.com/photo-1580554000000"
    "?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&q=80"
)
DEFAULT_AMENITIES = ["Swimming Pool", "Garden", "Parking", "Security"]


class _Nested(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        return drop_blank(data)


class Price(_Nested):
    amount: float = 5000000
    price_type: str = "sale"


class Location(_Nested):
    address: str = "Vadodara"
    area: str = "Central Vadodara"
    city: str = "Vadodara"
    state: str = "Gujarat"
    pincode: str = "390001"


class Area(_Nested):
    value: float = 1500
    unit: str = "sqft"


class Specifications(_Nested):
    bedrooms: int = 3
    bathrooms: int = 2
    area: Area = Field(default_factory=Area)
    parking: int = 2
    furnished: str = "Semi-Furnished"


class Features(_Nested):
    """Flat copy of the specifications, kept for older admin list views."""

    bedrooms: int
    bathrooms: int
    area: float
    area_unit: str
    parking: int
    furnished: str


class PropertyImage(_Nested):
    url: str
    alt: str = "Property image"
    is_primary: bool = False


class Property(RecordModel):
    title: str = "New Property"
    description: str = "Property description"
    property_type: str = "Villa"
    type: str | None = None
    price: Price = Field(default_factory=Price)
    location: Location = Field(default_factory=Location)
    specifications: Specifications = Field(default_factory=Specifications)
    features: Features | None = None
    images: list[PropertyImage] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=lambda: list(DEFAULT_AMENITIES))
    status: str = "available"
    is_featured: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_type_alias(cls, data: Any) -> Any:
        # The add-property form sends either `type` or `propertyType`.
        if isinstance(data, dict):
            prop_type = data.get("propertyType") or data.get("type")
            if prop_type:
                data = {**data, "propertyType": prop_type}
        return data

    @field_validator("images", mode="before")
    @classmethod
    def _images_from_urls(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"url": v} if isinstance(v, str) else v for v in value]
        return value

    @model_validator(mode="after")
    def _fill_derived(self) -> Property:
        self.type = self.property_type
        if not self.images:
            self.images = [PropertyImage(url=DEFAULT_IMAGE_URL, is_primary=True)]
        for index, image in enumerate(self.images):
            if image.alt == "Property image" and index > 0:
                image.alt = f"Property image {index + 1}"
        if not any(image.is_primary for image in self.images):
            self.images[0].is_primary = True
        specs = self.specifications
        self.features = Features(
            bedrooms=specs.bedrooms,
            bathrooms=specs.bathrooms,
            area=specs.area.value,
            area_unit=specs.area.unit,
            parking=specs.parking,
            furnished=specs.furnished,
        )
        return self
