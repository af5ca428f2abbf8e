"""UploadThing blob storage client (REST API over httpx)."""
import base64
import json
import logging
from typing import Any, Dict, Optional

import httpx

from ...core.config import get_settings
from ...core.exceptions import StorageError
from ...domain.models.photo import UploadedFile
from ..utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


def parse_api_key(token: str) -> str:
    """
    Return the secret API key from an UPLOADTHING_TOKEN.

    Tokens are base64 JSON documents carrying ``apiKey``; a bare ``sk_``
    secret is accepted as is.
    """
    if not token:
        return ""
    if token.startswith("sk_"):
        return token
    try:
        decoded = json.loads(base64.b64decode(token + "=" * (-len(token) % 4)))
    except (ValueError, TypeError):
        return token
    if isinstance(decoded, dict) and decoded.get("apiKey"):
        return str(decoded["apiKey"])
    return token


class UploadThingStorageClient:
    """
    Uploads photos and synthesized speech to UploadThing.

    Two steps per file: request a presigned upload from the REST API, then
    POST the bytes to the returned URL.
    """

    API_URL = "https://api.uploadthing.com/v6/uploadFiles"
    FILE_URL_TEMPLATE = "https://utfs.io/f/{key}"

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        settings = get_settings()
        self.api_key = parse_api_key(settings.uploadthing_token)
        self._http_client = http_client

        if not self.api_key:
            logger.warning("UPLOADTHING_TOKEN not found in environment variables")

    async def upload(
        self,
        data: bytes,
        filename: str,
        mime_type: str,
        owner_id: str,
        request_id: str,
    ) -> UploadedFile:
        """
        Upload bytes and return their public URL.

        Raises:
            StorageError: when the upload cannot be completed
        """
        if not data:
            raise StorageError("Refusing to upload an empty file", retryable=False)
        if not self.api_key:
            raise StorageError("UploadThing token not configured", retryable=False)

        client = self._http_client or httpx.AsyncClient(timeout=60.0)
        try:
            presigned = await retry_with_backoff(
                lambda: self._request_presigned(client, data, filename, mime_type, f"{owner_id}-{request_id}"),
                max_retries=2,
                initial_delay=0.5,
                max_delay=5.0,
                exceptions=(httpx.TransportError, StorageError),
            )
            await self._post_file(client, presigned, data, filename, mime_type)
        except StorageError:
            raise
        except httpx.HTTPError as e:
            logger.error(f"UploadThing upload failed for {filename}: {e}")
            raise StorageError(f"UploadThing upload failed: {e}") from e
        finally:
            if client is not self._http_client:
                await client.aclose()

        key = presigned["key"]
        url = presigned.get("fileUrl") or self.FILE_URL_TEMPLATE.format(key=key)
        logger.info(f"Uploaded {filename} ({len(data)} bytes) to {url}")
        return UploadedFile(url=url, key=key, size=len(data))

    async def _request_presigned(
        self,
        client: httpx.AsyncClient,
        data: bytes,
        filename: str,
        mime_type: str,
        custom_id: str,
    ) -> Dict[str, Any]:
        response = await client.post(
            self.API_URL,
            headers={"x-uploadthing-api-key": self.api_key},
            json={
                "files": [
                    {"name": filename, "size": len(data), "type": mime_type, "customId": custom_id}
                ],
                "acl": "public-read",
                "contentDisposition": "inline",
            },
        )
        if response.status_code >= 400:
            raise StorageError(
                f"UploadThing rejected upload request: {response.status_code} - {response.text[:200]}",
                retryable=response.status_code >= 500,
            )

        entries = response.json().get("data") or []
        if not entries or not entries[0].get("key") or not entries[0].get("url"):
            raise StorageError("UploadThing returned no presigned upload", retryable=False)
        return entries[0]

    async def _post_file(
        self,
        client: httpx.AsyncClient,
        presigned: Dict[str, Any],
        data: bytes,
        filename: str,
        mime_type: str,
    ) -> None:
        response = await client.post(
            presigned["url"],
            data=presigned.get("fields") or {},
            files={"file": (filename, data, mime_type)},
        )
        if response.status_code >= 400:
            raise StorageError(
                f"Presigned upload failed: {response.status_code} - {response.text[:200]}",
                retryable=response.status_code >= 500,
            )
