"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.

Site-facing payloads use camelCase keys; the upload proxy keeps the media host's snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    """Base for schemas serialized with camelCase aliases."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable conversion from SQLAlchemy models
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Media upload proxy

class MediaUploadResponse(BaseModel):
    """
    Response schema for POST /api/upload.
    Mirrors the media descriptor fields returned by Cloudinary.
    """
    secure_url: str
    public_id: str
    resource_type: str
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None
    success: bool = True


class MediaDeleteResponse(BaseModel):
    success: bool
    message: str
    public_id: str


# Gallery

class HotelCategorySummary(CamelModel):
    id: int
    title: str
    slug: str


class GalleryImageResponse(CamelModel):
    """
    Response schema for a gallery image with its category joined.
    Used by /api/admin/gallery endpoints.
    """
    id: int
    url: str
    public_id: str
    category: str
    caption: Optional[str] = None
    category_id: Optional[int] = None
    created_at: datetime
    hotel_category: Optional[HotelCategorySummary] = None


class GalleryImageListResponse(BaseModel):
    success: bool = True
    data: List[GalleryImageResponse]


class GalleryImageItemResponse(BaseModel):
    success: bool = True
    data: GalleryImageResponse


class GalleryImageCreate(CamelModel):
    """
    Metadata accepted when creating a gallery image.
    Used for both the JSON and the multipart form of POST /api/admin/gallery.
    """
    category: str = Field(min_length=1, max_length=100)
    caption: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("caption", "category_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, str):
            return v.strip()
        return v


class GalleryImageJSONCreate(GalleryImageCreate):
    """
    JSON body of POST /api/admin/gallery for media already uploaded to Cloudinary.
    """
    url: str = Field(min_length=1)
    public_id: str = Field(min_length=1)

    @field_validator("url", "public_id", mode="before")
    @classmethod
    def strict_string(cls, v):
        # Numbers and other JSON types are not coerced to str
        if v is not None and not isinstance(v, str):
            raise ValueError("must be a string")
        return v.strip() if isinstance(v, str) else v


class BulkDeleteRequest(BaseModel):
    """
    Request schema for bulk deleting gallery images.
    Used by POST /api/admin/gallery/bulk-delete endpoint.
    """
    ids: List[int] = Field(min_length=1)

    @field_validator("ids")
    @classmethod
    def validate_unique_ids(cls, v):
        if len(v) != len(set(v)):
            raise ValueError("Duplicate image IDs are not allowed")
        return v


class BulkDeleteResponse(BaseModel):
    success: bool
    deleted_ids: List[int]
    failed: List[Dict[str, Any]]


# Admin login

class LoginRequest(BaseModel):
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# Public site data

class PriceCategory(CamelModel):
    id: int
    title: str
    specs: Dict[str, bool] = {}


class PriceResponse(CamelModel):
    id: int
    label: Optional[str] = None
    hourly_hours: int
    rate_cents: int
    category: PriceCategory


class PriceListResponse(BaseModel):
    success: bool = True
    data: List[PriceResponse]


class PriceTierResponse(CamelModel):
    id: int
    label: str
    hourly_hours: int
    rate_cents: int
    display_rate: str
    rate_unit: str
    duration_caption: str
    features: List[str]
    is_best_value: bool
    is_popular: bool


class PriceGroupResponse(CamelModel):
    category_id: int
    category_title: str
    options_text: str
    tiers: List[PriceTierResponse]


class PriceTableResponse(CamelModel):
    success: bool = True
    refresh_interval_seconds: int
    data: List[PriceGroupResponse]


class CategoryImage(CamelModel):
    id: int
    url: str
    caption: Optional[str] = None


class CategoryPrice(CamelModel):
    id: int
    hourly_hours: int
    rate_cents: int


class CardMediaResponse(CamelModel):
    kind: str
    image_url: str
    video_url: Optional[str] = None
    poster: Optional[str] = None


class CategoryCardResponse(CamelModel):
    id: int
    slug: str
    title: str
    description: Optional[str] = None
    specs: Dict[str, bool] = {}
    essential_amenities: List[str] = []
    bed_type: Optional[str] = None
    max_occupancy: Optional[int] = None
    room_size: Optional[str] = None
    room_count: int
    video_url: Optional[str] = None
    images: List[CategoryImage] = []
    prices: List[CategoryPrice] = []
    media: CardMediaResponse


class CategoryListResponse(BaseModel):
    success: bool = True
    data: List[CategoryCardResponse]


class ActiveFeatureResponse(CamelModel):
    key: str
    label: str
    category: str


class RoomDetailsResponse(CamelModel):
    id: int
    title: str
    description: str
    specs: Dict[str, str]
    essential_amenities: List[str]
    features: Dict[str, List[ActiveFeatureResponse]]
    images: List[CategoryImage]
    current_index: int = 0
    current_image: Optional[CategoryImage] = None
    lightbox_open: bool = False
    video_url: Optional[str] = None


class RoomFeatureResponse(CamelModel):
    id: int
    key: str
    label: str
    description: Optional[str] = None
    category: str
    is_active: bool
    sort_order: int


class RoomFeatureListResponse(BaseModel):
    success: bool = True
    data: List[RoomFeatureResponse]


class ContactResponse(CamelModel):
    name: str
    address: List[str]
    phones: Dict[str, str]
    email: str
    reception_hours: Dict[str, str]
    quick_services: List[str]


class SlideResponse(CamelModel):
    type: str
    src: str


class CarouselResponse(CamelModel):
    autoplay_delay_seconds: float
    autoplay: bool = True
    start_index: int = 0
    loop: bool = True
    slides: List[SlideResponse]
