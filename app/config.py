"""
Configuration management for the FastAPI application.
Uses Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings
from typing import List, Dict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_TITLE: str = "Dolly Hotel API"
    API_VERSION: str = "0.1.0"
    API_DESCRIPTION: str = "Backend API for the Dolly Hotel website, gallery admin and media uploads"

    # CORS Configuration
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    # Empty means no database: the app still starts, database endpoints fail
    DATABASE_URL: str = ""
    # Create tables from the models on startup (development only, use alembic otherwise)
    AUTO_CREATE_TABLES: bool = False

    # Cloudinary Configuration
    CLOUDINARY_CLOUD_NAME: str = ""
    # Older deployments only set the public cloud name
    NEXT_PUBLIC_CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_FOLDER: str = "dolly-hotel"

    # Upload policy
    # Rough size estimate for a 60 second video, not a decoded duration check
    MAX_VIDEO_UPLOAD_BYTES: int = 50 * 1024 * 1024
    # Convert admin gallery uploads to WebP before sending them to Cloudinary
    GALLERY_WEBP_CONVERSION: bool = True

    # Admin Password
    # Should be bcrypt hashed password (see generate_password_hash.py)
    ADMIN_PASSWORD_HASH: str = ""

    # JWT Configuration
    # SECRET_KEY should be a long random string (e.g., generated with: openssl rand -hex 32)
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production-use-openssl-rand-hex-32"
    JWT_EXPIRE_MINUTES: int = 60

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Hotel contact details served by /api/contact
    HOTEL_NAME: str = "Dolly Hotel"
    HOTEL_ADDRESS_LINES: List[str] = [
        "1no. Netaji Park, G.T. Road (Dolly Pharmacy)",
        "Bandel, Hooghly, 712123",
        "India",
    ]
    HOTEL_PHONES: Dict[str, str] = {
        "Main": "+91 8777659544",
        "Reservations": "+91 8777651011",
    }
    HOTEL_EMAIL: str = "dollyhotelbandel@gmail.com"
    HOTEL_RECEPTION_HOURS: Dict[str, str] = {
        "Check-in": "10:00 AM",
        "Check-out": "9:30 AM",
        "Hourly Booking Ends At": "7:00 PM",
    }
    HOTEL_QUICK_SERVICES: List[str] = [
        "Free Wi-Fi",
        "Free Parking",
        "Room Service",
        "Fitness Center",
    ]

    # Hero carousel on the landing page
    HERO_SLIDES: List[Dict[str, str]] = [
        {
            "type": "image",
            "src": "https://images.unsplash.com/photo-1758039205082-256c2fde63bb?q=80&w=1110&auto=format&fit=crop",
        },
        {"type": "video", "src": "/hotel-tour.mp4"},
        {
            "type": "image",
            "src": "https://images.unsplash.com/photo-1600585154340-be6161a56a0c?w=1200",
        },
    ]
    HERO_AUTOPLAY_DELAY_SECONDS: float = 4.0

    # Price polling interval advertised to clients
    PRICE_REFRESH_INTERVAL_SECONDS: int = 60

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Global settings instance
settings = Settings()
