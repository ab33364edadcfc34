"""
Pydantic models for request/response bodies in the web application.

Provides request validation with sensible defaults and constraints.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.services.rate_service import ShippingRequest


class RateRequest(BaseModel):
    """
    Body of a rate lookup.

    Presence of required fields is checked by the rate service so that the
    first missing field is reported with a specific message. This model only
    coerces types and trims strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    country: Optional[str] = Field(None, description="Destination ISO-2 country code")
    street: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")
    weight: Optional[float] = Field(None, description="Package weight in weight_unit")
    weight_unit: Optional[str] = Field(None, alias="weightUnit", description="g, kg or lb")
    length: Optional[float] = Field(None, description="Length in cm")
    width: Optional[float] = Field(None, description="Width in cm")
    height: Optional[float] = Field(None, description="Height in cm")

    @field_validator(
        "country", "street", "city", "province", "postal_code", "weight_unit", mode="before"
    )
    @classmethod
    def strip_strings(cls, v):
        """Strip whitespace; blank strings count as missing."""
        if isinstance(v, str):
            v = v.strip()
            return v if v else None
        return v

    @field_validator("country")
    @classmethod
    def upper_country(cls, v):
        return v.upper() if v else v

    @field_validator("weight_unit")
    @classmethod
    def lower_unit(cls, v):
        return v.lower() if v else v

    def to_shipping_request(self) -> ShippingRequest:
        """Convert to the service-layer request."""
        return ShippingRequest(
            country=self.country,
            street=self.street,
            city=self.city,
            province=self.province,
            postal_code=self.postal_code,
            weight=self.weight,
            weight_unit=self.weight_unit,
            length=self.length,
            width=self.width,
            height=self.height,
        )


# ============================================================================
# API Response Models
# ============================================================================

class FXRateResponse(BaseModel):
    """Response model for FX rate endpoint."""

    rate: float
    source: str
    currency_pair: str
    fetched_at: Optional[float] = None
