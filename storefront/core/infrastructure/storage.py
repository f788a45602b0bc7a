# storefront/core/infrastructure/storage.py

import logging
import time
from typing import Any, Optional
from uuid import UUID

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.datastructures import UploadFile

from ..config import settings
from ..exceptions import StorageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpg", "image/jpeg"}


def get_s3_client():
    return boto3.client(
        "s3",
        region_name=settings.S3_REGION,
        aws_access_key_id=settings.S3_ACCESS_KEY or None,
        aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
    )


def is_allowed_image(image: Optional[Any]) -> bool:
    """Only png/jpg/jpeg uploads are accepted; anything else counts as no image."""
    if not isinstance(image, UploadFile) or not image.filename:
        return False
    return image.content_type in ALLOWED_IMAGE_TYPES


def upload_product_image(owner_id: UUID, image: UploadFile) -> str:
    """
    Upload a product image to the bucket and return its public URL.

    Keys are ``<owner id>-<epoch millis>`` so uploads from one seller never collide.
    """
    key = f"{owner_id}-{int(time.time() * 1000)}"
    try:
        get_s3_client().upload_fileobj(
            image.file,
            settings.S3_BUCKET,
            key,
            ExtraArgs={"ACL": "public-read", "ContentType": image.content_type},
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to upload image {image.filename} to S3: {e}")
        raise StorageError(technical_details=str(e), filename=image.filename)

    url = f"https://{settings.S3_BUCKET}.s3.{settings.S3_REGION}.amazonaws.com/{key}"
    logger.info(f"Uploaded product image {image.filename} as {key}")
    return url


def delete_product_image(image_url: str) -> None:
    """Remove an uploaded image whose product was never saved. Failures are only logged."""
    key = image_url.rsplit("/", 1)[-1]
    try:
        get_s3_client().delete_object(Bucket=settings.S3_BUCKET, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to remove orphaned image {key} from S3: {e}")
        return
    logger.info(f"Removed orphaned image {key}")
