"""
Cloudinary service for media upload and deletion.
Wraps the Cloudinary SDK behind gateway objects built from an explicit MediaHostConfig,
so credentials are validated once at construction instead of being read from global state.
"""
import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from dataclasses import dataclass, field
import asyncio
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from app.config import settings
from app.exceptions import ConfigurationError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_TRANSFORMATION = [{"width": 1200, "height": 800, "crop": "limit", "quality": "auto"}]
VIDEO_TRANSFORMATION = [{"width": 1280, "height": 720, "crop": "limit", "quality": "auto", "duration": "60"}]

DEFAULT_MAX_VIDEO_BYTES = 50 * 1024 * 1024

VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".wmv", ".flv", ".webm", ".mkv")
RESOURCE_TYPES = ("image", "video", "raw")

# .../image/upload/v1234567890/folder/public-id.jpg
_PUBLIC_ID_PATTERN = re.compile(r"/(?:image|video)/upload/(?:v\d+/)?(.+?)(?:\.[^./]+)?$")


@dataclass(frozen=True)
class MediaHostConfig:
    """Credentials and upload folder for the Cloudinary account."""

    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = "dolly-hotel"

    @classmethod
    def from_settings(cls, settings) -> "MediaHostConfig":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME or settings.NEXT_PUBLIC_CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
        )

    @property
    def missing(self) -> List[str]:
        missing = []
        if not self.cloud_name:
            missing.append("CLOUDINARY_CLOUD_NAME")
        if not self.api_key:
            missing.append("CLOUDINARY_API_KEY")
        if not self.api_secret:
            missing.append("CLOUDINARY_API_SECRET")
        return missing

    def validate(self) -> "MediaHostConfig":
        missing = self.missing
        if missing:
            logger.error(f"Cloudinary env missing: {', '.join(missing)}")
            raise ConfigurationError(missing)
        return self

    def credentials(self) -> Dict[str, Any]:
        """Per-call SDK options; these override any global cloudinary.config()."""
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "secure": True,
        }


@dataclass
class MediaDescriptor:
    """Normalized result of a successful upload."""

    secure_url: str
    public_id: str
    resource_type: str
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None

    @classmethod
    def from_result(cls, result: Dict[str, Any]) -> "MediaDescriptor":
        secure_url = result.get("secure_url")
        public_id = result.get("public_id")
        if not secure_url or not public_id:
            raise UpstreamError(
                "Upload failed - no result",
                detail=f"Cloudinary response missing secure_url/public_id: {result}",
            )
        return cls(
            secure_url=secure_url,
            public_id=public_id,
            resource_type=result.get("resource_type", "image"),
            format=result.get("format"),
            width=result.get("width"),
            height=result.get("height"),
            bytes=result.get("bytes"),
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "secure_url": self.secure_url,
            "public_id": self.public_id,
            "resource_type": self.resource_type,
            "format": self.format,
            "width": self.width,
            "height": self.height,
            "bytes": self.bytes,
            "success": True,
        }


@dataclass
class DeletionOutcome:
    public_id: str
    resource_type: str
    result: Optional[str]

    @property
    def ok(self) -> bool:
        return self.result == "ok"

    @property
    def not_found(self) -> bool:
        return self.result == "not found"


@dataclass
class BulkDeletionSummary:
    total: int
    successes: int
    failures: int
    outcomes: List[Any] = field(default_factory=list)


def media_kind(content_type: Optional[str]) -> Optional[str]:
    """Coarse media kind for a MIME type: "image", "video" or None."""
    if not content_type:
        return None
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return None


def infer_resource_type(public_id_or_url: str) -> str:
    """
    Guess the Cloudinary resource type from a public ID or delivery URL.

    Looks for a "video"/"videos" path segment or a video file extension on the
    last segment. Public IDs usually carry no extension, so a video stored
    under a neutral folder is reported as "image": pass the type explicitly
    whenever it is known.
    """
    lowered = public_id_or_url.lower().split("?", 1)[0]
    segments = [s for s in lowered.split("/") if s]
    if any(s in ("video", "videos") for s in segments[:-1]):
        return "video"
    if segments and segments[-1].endswith(VIDEO_EXTENSIONS):
        return "video"
    return "image"


def extract_public_id_from_url(cloudinary_url: str) -> Optional[str]:
    """
    Extract Cloudinary public_id from a delivery URL.

    https://res.cloudinary.com/{cloud}/image/upload/v{version}/{folder}/{id}.{ext} -> "{folder}/{id}"

    Returns None when the URL is not a Cloudinary upload URL.
    """
    match = _PUBLIC_ID_PATTERN.search(cloudinary_url)
    return match.group(1) if match else None


class MediaUploadGateway:
    """
    Forwards uploaded file bytes to Cloudinary and normalizes the response.
    """

    def __init__(self, config: MediaHostConfig, max_video_bytes: int = DEFAULT_MAX_VIDEO_BYTES):
        self.config = config.validate()
        self.max_video_bytes = max_video_bytes

    def check(self, content_type: Optional[str], size: int) -> str:
        """Validate MIME class and size; returns the resource type to upload as."""
        kind = media_kind(content_type)
        if kind is None:
            raise ValidationError("Only image and video files are allowed")
        if kind == "video" and size > self.max_video_bytes:
            raise ValidationError("Video file too large. Please ensure video is under 60 seconds.")
        return kind

    async def upload(self, content: bytes, content_type: Optional[str], filename: Optional[str] = None) -> MediaDescriptor:
        """
        Upload a single image or video.

        Raises:
            ValidationError: wrong MIME class or oversized video (nothing is sent)
            UpstreamError: Cloudinary rejected the upload or could not be reached
        """
        resource_type = self.check(content_type, len(content))
        transformation = VIDEO_TRANSFORMATION if resource_type == "video" else IMAGE_TRANSFORMATION

        logger.info(f"Uploading {resource_type} to Cloudinary: {filename or 'unnamed'} ({len(content):,} bytes)")
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                content,
                resource_type=resource_type,
                folder=self.config.folder,
                transformation=transformation,
                **self.config.credentials(),
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload error for {filename or 'unnamed'}: {str(e)}")
            raise UpstreamError(
                "Upload failed. Please check your Cloudinary configuration.", detail=str(e)
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error during upload: {str(e)}", exc_info=True)
            raise UpstreamError(
                "Upload failed. Please check your Cloudinary configuration.", detail=str(e)
            ) from e

        if not result:
            raise UpstreamError("Upload failed - no result")

        descriptor = MediaDescriptor.from_result(result)
        logger.info(f"Successfully uploaded {descriptor.resource_type}: {descriptor.public_id}")
        return descriptor


class MediaDeletionGateway:
    """
    Requests asset deletion from Cloudinary.
    """

    def __init__(self, config: MediaHostConfig):
        self.config = config.validate()

    async def delete(self, public_id: str, resource_type: Optional[str] = None) -> DeletionOutcome:
        """
        Delete one asset. A missing resource_type is inferred from the public ID.

        Raises:
            UpstreamError: Cloudinary could not be reached or raised an error
        """
        resource_type = resource_type or infer_resource_type(public_id)
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                resource_type=resource_type,
                invalidate=True,  # Invalidate CDN cache
                **self.config.credentials(),
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary delete error for {public_id}: {str(e)}")
            raise UpstreamError(
                "Delete failed. Please check your Cloudinary configuration.", detail=str(e)
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error during deletion of {public_id}: {str(e)}", exc_info=True)
            raise UpstreamError(
                "Delete failed. Please check your Cloudinary configuration.", detail=str(e)
            ) from e

        outcome = DeletionOutcome(
            public_id=public_id,
            resource_type=resource_type,
            result=(result or {}).get("result"),
        )
        if outcome.ok:
            logger.info(f"Deleted {resource_type} from Cloudinary: {public_id}")
        else:
            logger.warning(f"Unexpected Cloudinary delete result for {public_id}: {result}")
        return outcome

    async def bulk_delete(
        self,
        public_ids: Iterable[str],
        resource_type: Optional[str] = None,
        resource_types: Optional[Dict[str, str]] = None,
    ) -> BulkDeletionSummary:
        """
        Delete several assets concurrently.

        `resource_types` maps individual public IDs to their type and wins over
        `resource_type`. Outcomes are returned in input order; failed calls
        appear as exceptions.
        """
        public_ids = list(public_ids)
        resource_types = resource_types or {}
        outcomes = await asyncio.gather(
            *(self.delete(public_id, resource_types.get(public_id, resource_type)) for public_id in public_ids),
            return_exceptions=True,
        )
        successes = sum(1 for o in outcomes if isinstance(o, DeletionOutcome) and o.ok)
        summary = BulkDeletionSummary(
            total=len(outcomes),
            successes=successes,
            failures=len(outcomes) - successes,
            outcomes=list(outcomes),
        )
        logger.info(f"Cloudinary bulk deletion: {summary.successes} successful, {summary.failures} failed")
        return summary


def validate_cloudinary_config() -> bool:
    """
    Check whether Cloudinary credentials are configured, logging what is missing.
    """
    missing = MediaHostConfig.from_settings(settings).missing
    for name in missing:
        logger.warning(f"{name} not configured")
    return not missing


def get_upload_gateway() -> MediaUploadGateway:
    """
    FastAPI dependency returning the upload gateway.
    Raises ConfigurationError (500) when credentials are missing, before any network call.
    """
    return MediaUploadGateway(
        MediaHostConfig.from_settings(settings),
        max_video_bytes=settings.MAX_VIDEO_UPLOAD_BYTES,
    )


def get_deletion_gateway() -> MediaDeletionGateway:
    """FastAPI dependency returning the deletion gateway."""
    return MediaDeletionGateway(MediaHostConfig.from_settings(settings))
