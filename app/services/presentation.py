"""
View-model logic for the public site: price table, category cards, room details and the hero carousel.
Functions take ORM rows or any objects with the same attributes.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging
import math

from app.services.cloudinary_service import infer_resource_type

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder-room.svg"

# Capability flags shown on price cards, in display order
PRICE_SPEC_FEATURES = [
    ("wifi", "Free WiFi"),
    ("parking", "Free Parking"),
    ("ac", "Air Conditioning"),
    ("tv", "Smart TV"),
    ("geyser", "Hot Water"),
]
FILLER_FEATURES = ["Room Service", "Fitness Center Access", "24/7 Security", "Laundry Service"]
MIN_PRICE_FEATURES = 4

DEFAULT_ROOM_SPECS = {
    "bed_type": "Double Bed",
    "max_occupancy": "2 Guests",
    "room_size": "25 sqm",
}


# Price table

@dataclass
class PriceTier:
    id: int
    label: str
    hourly_hours: int
    rate_cents: int
    display_rate: str
    rate_unit: str
    duration_caption: str
    features: List[str]
    is_best_value: bool = False
    is_popular: bool = False


@dataclass
class PriceGroup:
    category_id: int
    category_title: str
    tiers: List[PriceTier] = field(default_factory=list)

    @property
    def options_text(self) -> str:
        count = len(self.tiers)
        return f"{count} pricing {'option' if count == 1 else 'options'} available"


def per_hour_rate(price) -> float:
    if not price.hourly_hours or price.hourly_hours <= 0:
        return math.inf
    return price.rate_cents / price.hourly_hours


def best_value_index(prices: Sequence[Any]) -> int:
    """
    Index of the tier with the lowest per-hour rate, or -1 with fewer than two tiers.
    Ties go to the earlier tier.
    """
    if len(prices) < 2:
        return -1
    best = 0
    for index, price in enumerate(prices):
        if per_hour_rate(price) < per_hour_rate(prices[best]):
            best = index
    return best


def price_features(specs: Optional[Mapping[str, bool]], hourly_hours: int, minimum: int = MIN_PRICE_FEATURES) -> List[str]:
    specs = specs or {}
    features = [label for key, label in PRICE_SPEC_FEATURES if specs.get(key)]

    if hourly_hours >= 12:
        features.append("Complimentary Breakfast")
    else:
        features.append("Welcome Drink")

    for filler in FILLER_FEATURES:
        if len(features) >= minimum:
            break
        if filler not in features:
            features.append(filler)

    return features[:minimum]


def price_label(price) -> str:
    if price.label:
        return price.label
    return f"{price.hourly_hours} {'Hour' if price.hourly_hours == 1 else 'Hours'}"


def is_popular(price) -> bool:
    # Day stay
    return price.hourly_hours == 24


def format_rate(rate_cents: int) -> str:
    """Rupee amount with thousands separators, e.g. 150000 -> "₹1,500"."""
    if rate_cents % 100 == 0:
        return f"₹{rate_cents // 100:,}"
    return f"₹{rate_cents / 100:,.2f}"


def group_prices_by_category(prices: Iterable[Any]) -> Dict[str, List[Any]]:
    grouped: Dict[str, List[Any]] = {}
    for price in prices:
        grouped.setdefault(price.category.title, []).append(price)
    return grouped


def build_price_table(prices: Iterable[Any]) -> List[PriceGroup]:
    groups = []
    for title, tiers in group_prices_by_category(prices).items():
        best = best_value_index(tiers)
        category = tiers[0].category
        group = PriceGroup(category_id=category.id, category_title=title)
        for index, price in enumerate(tiers):
            full_day = price.hourly_hours >= 24
            group.tiers.append(PriceTier(
                id=price.id,
                label=price_label(price),
                hourly_hours=price.hourly_hours,
                rate_cents=price.rate_cents,
                display_rate=format_rate(price.rate_cents),
                rate_unit="per day" if full_day else "per hour",
                duration_caption="Full Day Experience" if full_day else "Hourly Rate",
                features=price_features(category.specs, price.hourly_hours),
                is_best_value=index == best,
                is_popular=is_popular(price) and index != best,
            ))
        groups.append(group)
    return groups


# Category card

@dataclass
class CardMedia:
    """
    Media shown at the top of a category card.
    A video plays with the first image as poster; a failed video falls back to the image.
    """
    image_url: str
    video_url: Optional[str] = None
    video_failed: bool = False

    @property
    def kind(self) -> str:
        return "video" if self.video_url and not self.video_failed else "image"

    @property
    def poster(self) -> Optional[str]:
        return self.image_url if self.kind == "video" else None

    def on_video_error(self):
        logger.warning(f"Video failed to load, falling back to image: {self.video_url}")
        self.video_failed = True


def select_card_media(category) -> CardMedia:
    images = list(category.images or [])
    image_url = images[0].url if images else PLACEHOLDER_IMAGE
    video_url = category.video_url.strip() if category.video_url and category.video_url.strip() else None
    media = CardMedia(image_url=image_url, video_url=video_url)
    # Links that are not video files never load in the card player
    if video_url and infer_resource_type(video_url) != "video":
        media.on_video_error()
    return media


# Room details

@dataclass
class ActiveFeature:
    key: str
    label: str
    category: str = "general"


def room_specs(room) -> Dict[str, str]:
    return {
        "bed_type": room.bed_type or DEFAULT_ROOM_SPECS["bed_type"],
        "max_occupancy": f"{room.max_occupancy} Guests" if room.max_occupancy else DEFAULT_ROOM_SPECS["max_occupancy"],
        "room_size": room.room_size or DEFAULT_ROOM_SPECS["room_size"],
    }


def active_features(specs: Optional[Mapping[str, bool]], room_features: Iterable[Any] = ()) -> List[ActiveFeature]:
    """Enabled spec flags, labelled from the room feature table when a row exists."""
    if not specs:
        return []
    by_key = {feature.key: feature for feature in room_features}
    features = []
    for key, enabled in specs.items():
        if not enabled:
            continue
        known = by_key.get(key)
        features.append(ActiveFeature(
            key=key,
            label=known.label if known else key[:1].upper() + key[1:],
            category=known.category if known else "general",
        ))
    return features


def group_features(features: Iterable[ActiveFeature]) -> Dict[str, List[ActiveFeature]]:
    grouped: Dict[str, List[ActiveFeature]] = {}
    for feature in features:
        grouped.setdefault(feature.category, []).append(feature)
    return grouped


class ImageViewer:
    """Main image index plus the enlarged-image lightbox of the room details modal."""

    def __init__(self, images: Sequence[Any]):
        self.images = list(images)
        self.current_index = 0
        self.lightbox_open = False
        self.selected_index = 0

    @property
    def current(self):
        return self.images[self.current_index] if self.images else None

    def next(self):
        if self.images:
            self.current_index = (self.current_index + 1) % len(self.images)

    def previous(self):
        if self.images:
            self.current_index = (self.current_index - 1) % len(self.images)

    def select(self, index: int):
        if not 0 <= index < len(self.images):
            raise IndexError(f"Image index {index} out of range")
        self.current_index = index

    def open_lightbox(self, index: int):
        if not 0 <= index < len(self.images):
            raise IndexError(f"Image index {index} out of range")
        self.selected_index = index
        self.lightbox_open = True

    def close_lightbox(self):
        self.lightbox_open = False


# Hero carousel

SLIDE_TYPES = ("image", "video")


@dataclass(frozen=True)
class Slide:
    type: str
    src: str

    def __post_init__(self):
        if self.type not in SLIDE_TYPES:
            raise ValueError(f"Unknown slide type '{self.type}'")
        if not self.src or not self.src.strip():
            raise ValueError("Slide source is empty")


class HeroCarousel:
    """
    Looping slide rotation.

    Image slides advance every `delay` seconds while autoplay runs. Landing on a
    video slide stops autoplay and restarts the video from the beginning; when it
    ends, autoplay resumes and the carousel moves on.
    """

    def __init__(self, slides: Sequence[Slide], delay: float = 4.0):
        if not slides:
            raise ValueError("HeroCarousel needs at least one slide")
        if delay <= 0:
            raise ValueError(f"Autoplay delay must be positive, got {delay}")
        self.slides = list(slides)
        self.delay = delay
        self.index = 0
        self.autoplay = True
        self.elapsed = 0.0
        self.video_playing = False
        self.video_position = 0.0
        self.select(0)

    @property
    def current(self) -> Slide:
        return self.slides[self.index]

    def select(self, index: int):
        self.index = index % len(self.slides)
        self.elapsed = 0.0
        if self.current.type == "video":
            self.autoplay = False
            self.video_position = 0.0
            self.video_playing = True
        else:
            self.video_playing = False

    def next(self):
        self.select(self.index + 1)

    def previous(self):
        self.select(self.index - 1)

    def tick(self, seconds: float):
        """Advance the autoplay clock."""
        if self.video_playing:
            self.video_position += seconds
        if not self.autoplay:
            return
        self.elapsed += seconds
        while self.autoplay and self.elapsed >= self.delay:
            self.elapsed -= self.delay
            carry = self.elapsed
            self.next()
            self.elapsed = carry if self.autoplay else 0.0

    def on_video_ended(self):
        if self.current.type != "video":
            return
        self.video_playing = False
        self.autoplay = True
        self.next()
