"""
Admin gallery routes.
Lists, creates and deletes gallery images. Every route requires an admin token.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, delete
from typing import Any, Dict, Optional, Type, TypeVar
import logging

from app.config import settings
from app.database import get_db
from app.exceptions import ConfigurationError, HotelAPIError, NotFoundError, UpstreamError, ValidationError
from app.models import GalleryImage, HotelCategory
from app.schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    GalleryImageCreate,
    GalleryImageJSONCreate,
    GalleryImageItemResponse,
    GalleryImageListResponse,
    GalleryImageResponse,
)
from app.services.cloudinary_service import (
    DeletionOutcome,
    get_deletion_gateway,
    get_upload_gateway,
    infer_resource_type,
)
from app.utils.image_converter import convert_to_webp
from app.utils.jwt_auth import require_admin

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

router = APIRouter(prefix="/admin/gallery", tags=["admin"], dependencies=[Depends(require_admin)])


def parse_payload(schema: Type[SchemaT], data: Any) -> SchemaT:
    """
    Validate a request payload against a schema.

    Raises:
        ValidationError: 400 with the field errors
    """
    try:
        return schema.model_validate(data)
    except SchemaValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise ValidationError("Validation error", detail=errors) from e


async def read_json_object(request: Request) -> Dict[str, Any]:
    """
    Decode a JSON object body. Routes read the body themselves so that the
    admin check always runs before any payload error is reported.
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body is not valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def _ensure_category_exists(db: AsyncSession, category_id: Optional[int]):
    if category_id is None:
        return
    if await db.get(HotelCategory, category_id) is None:
        raise ValidationError(f"Hotel category {category_id} does not exist")


async def _load_image(db: AsyncSession, image_id: int) -> Optional[GalleryImage]:
    result = await db.execute(
        select(GalleryImage)
        .options(selectinload(GalleryImage.hotel_category))
        .where(GalleryImage.id == image_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


@router.get("", response_model=GalleryImageListResponse)
async def list_gallery_images(db: AsyncSession = Depends(get_db)):
    """
    Get all gallery images, newest first, with their hotel category joined.
    """
    try:
        result = await db.execute(
            select(GalleryImage)
            .options(selectinload(GalleryImage.hotel_category))
            .order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
        )
        images = result.scalars().all()

        logger.info(f"Retrieved {len(images)} gallery images for admin")

        return GalleryImageListResponse(
            data=[GalleryImageResponse.model_validate(img) for img in images]
        )

    except Exception as e:
        logger.error(f"Admin gallery fetch error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to fetch gallery images", "detail": str(e)}
        )


@router.post("", response_model=GalleryImageItemResponse)
async def create_gallery_image(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Create a gallery image.

    JSON bodies reference media already uploaded to Cloudinary
    ({category, caption?, url, publicId, categoryId?}); anything else is read
    as multipart form data with a `file` field that is uploaded here first.
    Metadata is validated before any upload or database write.
    """
    try:
        content_type = request.headers.get("content-type", "")

        if "application/json" in content_type:
            image = await _image_from_json(request, db)
        else:
            image = await _image_from_form(request, db)

        db.add(image)
        await db.flush()
        created = await _load_image(db, image.id)
        await db.commit()

        logger.info(f"Saved gallery image: ID {created.id}, public_id={created.public_id}")
        return GalleryImageItemResponse(data=GalleryImageResponse.model_validate(created))

    except (ValidationError, ConfigurationError):
        raise
    except HotelAPIError as e:
        await db.rollback()
        logger.error(f"Admin gallery upload error: {e.message}")
        raise UpstreamError(
            "Failed to upload image",
            detail=getattr(e, "detail", None) or e.message,
        ) from e
    except Exception as e:
        logger.error(f"Admin gallery upload error: {str(e)}", exc_info=True)
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to upload image", "detail": str(e)}
        )


async def _image_from_json(request: Request, db: AsyncSession) -> GalleryImage:
    body = await read_json_object(request)

    if not body.get("url") or not body.get("publicId"):
        raise ValidationError("URL and public ID are required")

    metadata = parse_payload(GalleryImageJSONCreate, {
        "category": body.get("category"),
        "caption": body.get("caption"),
        "categoryId": body.get("categoryId"),
        "url": body.get("url"),
        "publicId": body.get("publicId"),
    })
    await _ensure_category_exists(db, metadata.category_id)

    return GalleryImage(
        url=metadata.url,
        public_id=metadata.public_id,
        category=metadata.category,
        caption=metadata.caption,
        category_id=metadata.category_id,
    )


async def _image_from_form(request: Request, db: AsyncSession) -> GalleryImage:
    try:
        form = await request.form()
    except Exception as e:
        raise ValidationError("Request body is not valid form data", detail=str(e)) from e

    file = form.get("file")
    if file is None or isinstance(file, str):
        raise ValidationError("No file provided")

    file_type = file.content_type or ""
    if not file_type.startswith("image/"):
        raise ValidationError("Only image files are allowed")

    metadata = parse_payload(GalleryImageCreate, {
        "category": form.get("category"),
        "caption": form.get("caption"),
        "categoryId": form.get("categoryId"),
    })
    await _ensure_category_exists(db, metadata.category_id)

    gateway = get_upload_gateway()
    content = await file.read()

    if settings.GALLERY_WEBP_CONVERSION:
        converted = convert_to_webp(content, file_type)
        content, file_type = converted.content, converted.content_type

    descriptor = await gateway.upload(content, file_type, file.filename)

    return GalleryImage(
        url=descriptor.secure_url,
        public_id=descriptor.public_id,
        category=metadata.category,
        caption=metadata.caption,
        category_id=metadata.category_id,
    )


@router.delete("/{image_id}")
async def delete_gallery_image(image_id: int, db: AsyncSession = Depends(get_db)):
    """
    Delete a gallery image from Cloudinary, then from the database.

    The row is only removed once Cloudinary reports "ok" or "not found"; on any
    other result the row is kept and the raw result is returned with a 502.
    """
    image = await db.get(GalleryImage, image_id)
    if image is None:
        raise NotFoundError(f"Image ID {image_id} does not exist")

    gateway = get_deletion_gateway()
    outcome = await gateway.delete(image.public_id, infer_resource_type(image.url))

    if not (outcome.ok or outcome.not_found):
        raise UpstreamError(
            "Failed to delete file from Cloudinary",
            status_code=status.HTTP_502_BAD_GATEWAY,
            result=outcome.result,
        )
    if outcome.not_found:
        logger.warning(f"Cloudinary asset {image.public_id} already gone, removing row {image_id}")

    await db.execute(delete(GalleryImage).where(GalleryImage.id == image_id))
    await db.commit()

    logger.info(f"Deleted gallery image: ID {image_id}")
    return {"success": True, "message": "Image deleted successfully", "id": image_id}


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_gallery_images(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Delete several gallery images ({"ids": [...]}).
    Cloudinary deletions run concurrently; rows are removed only for assets that are gone.
    """
    payload = parse_payload(BulkDeleteRequest, await read_json_object(request))

    result = await db.execute(select(GalleryImage).where(GalleryImage.id.in_(payload.ids)))
    images = result.scalars().all()
    found = {img.id for img in images}

    failed = [{"id": image_id, "error": "Image not found"} for image_id in payload.ids if image_id not in found]

    gateway = get_deletion_gateway()
    summary = await gateway.bulk_delete(
        [img.public_id for img in images],
        resource_types={img.public_id: infer_resource_type(img.url) for img in images},
    )

    deleted_ids = []
    for img, outcome in zip(images, summary.outcomes):
        if isinstance(outcome, DeletionOutcome) and (outcome.ok or outcome.not_found):
            deleted_ids.append(img.id)
        elif isinstance(outcome, DeletionOutcome):
            failed.append({"id": img.id, "error": "Failed to delete file from Cloudinary", "result": outcome.result})
        else:
            failed.append({"id": img.id, "error": str(outcome)})

    if deleted_ids:
        await db.execute(delete(GalleryImage).where(GalleryImage.id.in_(deleted_ids)))
        await db.commit()

    if failed:
        logger.warning(f"Partial bulk deletion: {len(deleted_ids)} deleted, {len(failed)} failed")
    logger.info(f"Bulk deleted {len(deleted_ids)} gallery image(s)")

    return BulkDeleteResponse(success=not failed, deleted_ids=deleted_ids, failed=failed)
