"""AWS S3 Service."""

import logging
import re
from io import BytesIO

import boto3
from botocore.exceptions import ClientError

from promokit.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class S3Service:
    """Handles S3 interactions for uploads and generated assets."""

    _instance = None
    _s3_client = None

    def __new__(cls):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            try:
                cls._instance._s3_client = boto3.client(
                    "s3",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                    region_name=settings.AWS_REGION,
                    config=boto3.session.Config(s3={'addressing_style': 'path'})
                )
            except Exception as e:
                logger.error(f"Failed to initialize S3 client: {e}")
                cls._instance._s3_client = None
        return cls._instance

    @property
    def client(self):
        """Get S3 client."""
        return self._s3_client

    @property
    def uploads_bucket(self) -> str:
        return self._validated_bucket_name(settings.S3_UPLOADS_BUCKET, "S3_UPLOADS_BUCKET")

    @property
    def assets_bucket(self) -> str:
        return self._validated_bucket_name(settings.S3_ASSETS_BUCKET, "S3_ASSETS_BUCKET")

    @staticmethod
    def _validated_bucket_name(value: str, setting_name: str) -> str:
        bucket = (value or "").strip()
        # Prevent boto3 raising a cryptic "Invalid bucket name" error when env is misconfigured.
        if not bucket:
            raise ValueError(f"{setting_name} is not configured.")
        # https://docs.aws.amazon.com/AmazonS3/latest/userguide/bucketnamingrules.html
        if not re.fullmatch(r"[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]", bucket):
            raise ValueError(f"Invalid {setting_name} value '{bucket}'.")
        return bucket

    def download_bytes(self, bucket: str, object_name: str) -> bytes:
        """Download an object fully into memory."""
        if not self.client:
            raise ValueError("AWS S3 credentials not configured.")

        try:
            file_stream = BytesIO()
            self.client.download_fileobj(bucket, object_name, file_stream)
            return file_stream.getvalue()
        except ClientError as e:
            logger.error(f"Error downloading s3://{bucket}/{object_name}: {e}")
            raise

    def upload_bytes(self, bucket: str, object_name: str, data: bytes, content_type: str) -> None:
        """Upload raw bytes to S3."""
        if not self.client:
            raise ValueError("AWS S3 credentials not configured.")
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=object_name,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            logger.error(f"Error uploading s3://{bucket}/{object_name}: {e}")
            raise
