"""
Public site routes: contact details, room categories, prices and the hero carousel.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
from typing import Optional
import logging

from app.config import settings
from app.database import get_db
from app.exceptions import HotelAPIError, NotFoundError, ValidationError
from app.models import HotelCategory, Price, RoomFeature
from app.schemas import (
    CarouselResponse,
    CategoryCardResponse,
    CategoryListResponse,
    ContactResponse,
    PriceListResponse,
    PriceResponse,
    PriceTableResponse,
    RoomDetailsResponse,
    RoomFeatureListResponse,
    RoomFeatureResponse,
)
from app.services.presentation import (
    HeroCarousel,
    ImageViewer,
    Slide,
    active_features,
    build_price_table,
    group_features,
    room_specs,
    select_card_media,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _fetch_prices(db: AsyncSession, category_id: Optional[int]):
    query = (
        select(Price)
        .options(selectinload(Price.category))
        .order_by(Price.category_id.asc(), Price.hourly_hours.asc(), Price.id.asc())
    )
    if category_id is not None:
        query = query.where(Price.category_id == category_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/contact", response_model=ContactResponse)
async def get_contact():
    """Hotel address, phone numbers, email and reception hours."""
    return ContactResponse(
        name=settings.HOTEL_NAME,
        address=settings.HOTEL_ADDRESS_LINES,
        phones=settings.HOTEL_PHONES,
        email=settings.HOTEL_EMAIL,
        reception_hours=settings.HOTEL_RECEPTION_HOURS,
        quick_services=settings.HOTEL_QUICK_SERVICES,
    )


@router.get("/carousel", response_model=CarouselResponse)
async def get_carousel():
    """
    Hero slides for the landing page.
    Autoplay starts off when the first slide is a video; it resumes once the video ends.
    """
    try:
        carousel = HeroCarousel(
            [Slide(**slide) for slide in settings.HERO_SLIDES],
            delay=settings.HERO_AUTOPLAY_DELAY_SECONDS,
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Hero carousel misconfigured: {str(e)}")
        raise HotelAPIError("Hero carousel is misconfigured", detail=str(e))

    return CarouselResponse(
        autoplay_delay_seconds=carousel.delay,
        autoplay=carousel.autoplay,
        start_index=carousel.index,
        slides=[{"type": s.type, "src": s.src} for s in carousel.slides],
    )


@router.get("/prices", response_model=PriceListResponse)
async def get_prices(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
):
    """Raw price tiers, optionally for one category. Polled by the price table."""
    try:
        prices = await _fetch_prices(db, category_id)
        return PriceListResponse(data=[PriceResponse.model_validate(p) for p in prices])
    except Exception as e:
        logger.error(f"Failed to retrieve prices: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to retrieve prices", "detail": str(e)}
        )


@router.get("/prices/table", response_model=PriceTableResponse)
async def get_price_table(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
):
    """Prices grouped by category with best value, popular and feature annotations."""
    try:
        prices = await _fetch_prices(db, category_id)
    except Exception as e:
        logger.error(f"Failed to retrieve prices: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to retrieve prices", "detail": str(e)}
        )

    groups = build_price_table(prices)
    return PriceTableResponse(
        refresh_interval_seconds=settings.PRICE_REFRESH_INTERVAL_SECONDS,
        data=[
            {
                "category_id": g.category_id,
                "category_title": g.category_title,
                "options_text": g.options_text,
                "tiers": g.tiers,
            }
            for g in groups
        ],
    )


@router.get("/categories", response_model=CategoryListResponse)
async def get_categories(db: AsyncSession = Depends(get_db)):
    """Room category cards with images, prices and the media to show first."""
    result = await db.execute(
        select(HotelCategory)
        .options(selectinload(HotelCategory.images), selectinload(HotelCategory.prices))
        .order_by(HotelCategory.id.asc())
    )
    categories = result.scalars().all()

    cards = []
    for category in categories:
        media = select_card_media(category)
        card = CategoryCardResponse.model_validate({
            "id": category.id,
            "slug": category.slug,
            "title": category.title,
            "description": category.description,
            "specs": category.specs or {},
            "essential_amenities": category.essential_amenities or [],
            "bed_type": category.bed_type,
            "max_occupancy": category.max_occupancy,
            "room_size": category.room_size,
            "room_count": category.room_count,
            "video_url": category.video_url,
            "images": category.images,
            "prices": category.prices,
            "media": {
                "kind": media.kind,
                "image_url": media.image_url,
                "video_url": media.video_url,
                "poster": media.poster,
            },
        })
        cards.append(card)

    logger.info(f"Retrieved {len(cards)} room categories")
    return CategoryListResponse(data=cards)


@router.get("/categories/{slug}", response_model=RoomDetailsResponse)
async def get_room_details(
    slug: str,
    image: Optional[int] = Query(None, ge=0),
    lightbox: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    Everything the room details modal shows for one category.
    `image` picks the main image; `lightbox=true` opens it enlarged.
    """
    result = await db.execute(
        select(HotelCategory)
        .options(selectinload(HotelCategory.images))
        .where(HotelCategory.slug == slug)
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError(f"Room category '{slug}' does not exist")

    viewer = ImageViewer(category.images)
    try:
        if image is not None:
            viewer.select(image)
        if lightbox:
            viewer.open_lightbox(viewer.current_index)
    except IndexError as e:
        raise ValidationError(str(e))

    features_result = await db.execute(select(RoomFeature).where(RoomFeature.is_active.is_(True)))
    features = active_features(category.specs, features_result.scalars().all())

    return RoomDetailsResponse.model_validate({
        "id": category.id,
        "title": category.title,
        "description": category.description or "",
        "specs": room_specs(category),
        "essential_amenities": category.essential_amenities or [],
        "features": group_features(features),
        "images": viewer.images,
        "current_index": viewer.current_index,
        "current_image": viewer.current,
        "lightbox_open": viewer.lightbox_open,
        "video_url": category.video_url,
    })


@router.get("/room-features", response_model=RoomFeatureListResponse)
async def get_room_features(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(RoomFeature)
        .where(RoomFeature.is_active.is_(True))
        .order_by(RoomFeature.sort_order.asc(), RoomFeature.id.asc())
    )
    return RoomFeatureListResponse(
        data=[RoomFeatureResponse.model_validate(f) for f in result.scalars().all()]
    )
