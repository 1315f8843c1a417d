"""
S3 Object Fetch Service
Supplies raw image bytes for a storage key. Failures are surfaced as
FetchError immediately; retries are left to the caller.
"""
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import config
from app_utils.errors import FetchError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


class S3ObjectFetcher:
    """Reads whole objects from a single bucket"""

    def __init__(
        self,
        bucket_name: Optional[str],
        client=None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        if client is None:
            # Credentials come from the environment / instance role
            client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
        self.client = client

    def fetch(self, key: str) -> bytes:
        """
        Download an object.

        Args:
            key: Object key inside the bucket

        Returns:
            Object body bytes

        Raises:
            FetchError: bucket not configured, object missing, or S3 failure
        """
        if not self.bucket_name:
            raise FetchError(key, "BUCKET_NAME is not set")

        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            data = response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            logger.error("failed to retrieve data from S3: key=%s err=%s", key, e)
            raise FetchError(
                key, f"failed to retrieve from S3 ({code})", not_found=code in NOT_FOUND_CODES
            ) from e
        except BotoCoreError as e:
            logger.error("failed to retrieve data from S3: key=%s err=%s", key, e)
            raise FetchError(key, f"failed to download from S3: {e}") from e

        logger.info("data successfully retrieved from S3: key=%s bytes=%d", key, len(data))
        return data


# Global fetcher, the boto3 client is reused across requests
_object_fetcher: Optional[S3ObjectFetcher] = None


def get_object_fetcher() -> S3ObjectFetcher:
    """Get or create the S3 fetcher instance"""
    global _object_fetcher
    if _object_fetcher is None:
        _object_fetcher = S3ObjectFetcher(
            bucket_name=config.BUCKET_NAME,
            region=config.AWS_REGION,
            endpoint_url=config.S3_ENDPOINT_URL,
        )
    return _object_fetcher
