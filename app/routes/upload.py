"""
Media upload proxy routes.
Forwards files to Cloudinary and deletes assets by public ID.
"""
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from typing import Optional
import logging

from app.exceptions import UpstreamError, ValidationError
from app.schemas import MediaDeleteResponse, MediaUploadResponse
from app.services.cloudinary_service import (
    RESOURCE_TYPES,
    MediaDeletionGateway,
    MediaUploadGateway,
    get_deletion_gateway,
    get_upload_gateway,
)
from app.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=MediaUploadResponse)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_media(
    request: Request,
    file: Optional[UploadFile] = File(None),
    gateway: MediaUploadGateway = Depends(get_upload_gateway),
):
    """
    Upload a single image or video to Cloudinary.

    Returns:
        MediaUploadResponse: secure_url, public_id, resource_type, format, width, height, bytes

    Raises:
        ValidationError: 400 if no file, not an image/video, or video too large
        ConfigurationError: 500 if Cloudinary credentials are missing
        UpstreamError: 500 if Cloudinary rejects the upload
    """
    if file is None:
        raise ValidationError("No file provided")

    # Reject by MIME class before reading the body
    gateway.check(file.content_type, 0)

    content = await file.read()
    descriptor = await gateway.upload(content, file.content_type, file.filename)
    return descriptor.to_response()


@router.delete("/upload", response_model=MediaDeleteResponse)
@limiter.limit(RATE_LIMITS["delete"])
async def delete_media(
    request: Request,
    public_id: Optional[str] = Query(None, alias="publicId"),
    resource_type: str = Query("image", alias="resourceType"),
    gateway: MediaDeletionGateway = Depends(get_deletion_gateway),
):
    """
    Delete an asset from Cloudinary.

    Only the "ok" result counts as success; anything else ("not found" included)
    is a 400 echoing the raw result.
    """
    if not public_id:
        raise ValidationError("Public ID is required")
    if resource_type not in RESOURCE_TYPES:
        raise ValidationError(f"Invalid resource type: {resource_type}")

    outcome = await gateway.delete(public_id, resource_type)
    if not outcome.ok:
        raise UpstreamError(
            "Failed to delete file from Cloudinary",
            status_code=400,
            result=outcome.result,
        )

    return {
        "success": True,
        "message": "File deleted successfully",
        "public_id": public_id,
    }
