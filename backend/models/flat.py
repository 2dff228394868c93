"""Pydantic models representing listing domain objects.

Flats and apartment details are built from snake_case dicts but serialize
with the stored document field names (``offerType``, ``type``,
``imageUrls``, ``builtYear``, ``totalFlats``), which is what relay clients
read.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Flat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    price: Optional[float] = None
    area: Optional[float] = None
    offer_type: str = Field("", alias="offerType")
    flat_type: str = Field("", alias="type")
    location: str = ""
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")
    description: str = ""


class Testimonial(BaseModel):
    quote: str = "No quote available."
    author: str = "Anonymous"


class ApartmentDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    address: str = "Not available"
    built_year: Optional[int] = Field(None, alias="builtYear")
    total_flats: int = Field(0, alias="totalFlats")
    description: str = "Details not available."
    amenities: List[str] = Field(default_factory=list)


class InquiryRequest(BaseModel):
    # Optional so that missing fields surface as 400 rather than a schema error.
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None

    def is_complete(self) -> bool:
        return all(value and value.strip() for value in (self.name, self.email, self.message))


class InquiryResponse(BaseModel):
    message: str = "Inquiry submitted successfully"
