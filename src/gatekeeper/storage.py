"""
Signed-URL issuance for private audio objects in Cloudflare R2 (S3-compatible).

The issuer presigns a single `get_object` request for one key in the configured
bucket. URLs and keys are never logged.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.gatekeeper.errors import IssuerUnavailable

logger = logging.getLogger(__name__)

STREAM_URL_TTL_SECONDS_DEFAULT = 300

# SigV4 presigned URLs cannot outlive seven days.
_MAX_TTL_SECONDS = 7 * 24 * 60 * 60


# PUBLIC_INTERFACE
def stream_url_ttl_seconds() -> int:
    """Validity window for stream URLs (STREAM_URL_TTL_SECONDS, default 300)."""
    try:
        ttl = int(os.getenv("STREAM_URL_TTL_SECONDS", str(STREAM_URL_TTL_SECONDS_DEFAULT)))
    except ValueError:
        return STREAM_URL_TTL_SECONDS_DEFAULT
    return ttl if is_valid_ttl(ttl) else STREAM_URL_TTL_SECONDS_DEFAULT


def is_valid_ttl(ttl_seconds: int) -> bool:
    return 0 < ttl_seconds <= _MAX_TTL_SECONDS


@dataclass(frozen=True)
class R2Settings:
    """Cloudflare R2 bucket and credentials."""

    endpoint: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    region: str = "auto"

    @classmethod
    def from_env(cls) -> "R2Settings":
        """
        Read R2 settings from the environment.

        R2_ENDPOINT wins over R2_ACCOUNT_ID; with only the account id the
        endpoint is https://<account>.r2.cloudflarestorage.com.

        Raises:
            RuntimeError: listing every missing variable.
        """
        endpoint = os.getenv("R2_ENDPOINT", "").strip()
        account_id = os.getenv("R2_ACCOUNT_ID", "").strip()
        if not endpoint and account_id:
            endpoint = f"https://{account_id}.r2.cloudflarestorage.com"

        values = {
            "R2_ENDPOINT": endpoint,
            "R2_BUCKET_NAME": os.getenv("R2_BUCKET_NAME", "").strip(),
            "R2_ACCESS_KEY_ID": os.getenv("R2_ACCESS_KEY_ID", "").strip(),
            "R2_SECRET_ACCESS_KEY": os.getenv("R2_SECRET_ACCESS_KEY", "").strip(),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise RuntimeError(
                "Object store configuration missing: " + ", ".join(missing)
                + " (R2_ENDPOINT may be replaced by R2_ACCOUNT_ID)."
            )

        return cls(
            endpoint=values["R2_ENDPOINT"],
            bucket=values["R2_BUCKET_NAME"],
            access_key_id=values["R2_ACCESS_KEY_ID"],
            secret_access_key=values["R2_SECRET_ACCESS_KEY"],
            region=os.getenv("R2_REGION", "auto").strip() or "auto",
        )


def build_s3_client(settings: R2Settings) -> Any:
    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
        region_name=settings.region,
        config=Config(signature_version="s3v4"),
    )


class CapabilityIssuer:
    """Presigns time-limited GET URLs for objects in one bucket."""

    def __init__(self, bucket: str, client: Any) -> None:
        self.bucket = bucket
        self._client = client

    @classmethod
    def from_settings(cls, settings: R2Settings) -> "CapabilityIssuer":
        return cls(bucket=settings.bucket, client=build_s3_client(settings))

    # PUBLIC_INTERFACE
    def issue_capability(self, storage_key: str, ttl_seconds: int) -> str:
        """
        Return a URL granting read access to `storage_key` for `ttl_seconds`.

        The key is signed exactly as stored; `/a.mp3` and `a.mp3` are different objects.

        Raises:
            ValueError: ttl outside 1 second .. 7 days, or an empty key.
            IssuerUnavailable: the signing client failed.
        """
        if not is_valid_ttl(ttl_seconds):
            raise ValueError(f"ttl_seconds must be within 1..{_MAX_TTL_SECONDS}, got {ttl_seconds}")

        if not storage_key:
            raise ValueError("storage_key is empty")

        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": storage_key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise IssuerUnavailable(f"presign failed ({exc.__class__.__name__})") from exc

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()


# PUBLIC_INTERFACE
def create_issuer_from_env(settings: Optional[R2Settings] = None) -> CapabilityIssuer:
    """Build the process-wide issuer from R2 settings (read from env by default)."""
    settings = settings or R2Settings.from_env()
    logger.info("R2: bucket=%s endpoint=%s region=%s", settings.bucket, settings.endpoint, settings.region)
    return CapabilityIssuer.from_settings(settings)
