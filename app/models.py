"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class HotelCategory(Base):
    """
    Room category (e.g. "Deluxe AC Room").
    Gallery images and prices reference it; specs holds boolean capability flags.
    """
    __tablename__ = "hotel_categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    specs = Column(JSON, nullable=False, default=dict)
    essential_amenities = Column(JSON, nullable=False, default=list)
    bed_type = Column(String, nullable=True)
    max_occupancy = Column(Integer, nullable=True)
    room_size = Column(String, nullable=True)
    room_count = Column(Integer, nullable=False, default=0)
    video_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    images = relationship(
        "GalleryImage",
        back_populates="hotel_category",
        order_by=lambda: GalleryImage.created_at.desc(),
    )
    prices = relationship(
        "Price",
        back_populates="category",
        order_by=lambda: Price.hourly_hours.asc(),
    )


class GalleryImage(Base):
    """
    Gallery image model.
    Stores the Cloudinary URL and public ID; rows are created on upload and never mutated.
    """
    __tablename__ = "gallery_images"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String, nullable=False)
    public_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    caption = Column(String, nullable=True)
    category_id = Column(
        Integer, ForeignKey("hotel_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    hotel_category = relationship("HotelCategory", back_populates="images")


class Price(Base):
    """Price tier for a category: rate_cents for a stay of hourly_hours."""
    __tablename__ = "prices"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String, nullable=True)
    hourly_hours = Column(Integer, nullable=False)
    rate_cents = Column(Integer, nullable=False)
    category_id = Column(
        Integer, ForeignKey("hotel_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )

    category = relationship("HotelCategory", back_populates="prices")


class RoomFeature(Base):
    """Display label and grouping for a spec flag key."""
    __tablename__ = "room_features"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, nullable=False, unique=True)
    label = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=False, default="general")
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
