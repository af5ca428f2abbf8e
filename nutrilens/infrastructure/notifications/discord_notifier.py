"""Discord webhook notifications for processed photos."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...core.config import get_settings
from ...domain.models.nutrition import NutritionAnalysis
from ...domain.models.photo import PhotoData, UploadedFile

logger = logging.getLogger(__name__)

# (field, label, unit)
MACRO_LINES = (
    ("calories", "Calories", ""),
    ("protein", "Protein", "g"),
    ("carbs", "Carbs", "g"),
    ("fats", "Fats", "g"),
    ("sugar", "Sugar", "g"),
    ("cholesterol", "Cholesterol", "mg"),
)

MINERAL_LINES = (
    ("potassium", "Potassium", "mg"),
    ("calcium", "Calcium", "mg"),
    ("iron", "Iron", "mg"),
    ("sodium", "Sodium", "mg"),
)

VITAMIN_NAMES = ("a", "c", "d", "e", "k", "b1", "b2", "b3", "b5", "b6", "b7", "b9", "b12")


class DiscordNotifier:
    """
    Posts a summary embed for every processed photo.

    Delivery is best-effort: failures are logged and never raised.
    """

    SUCCESS_COLOR = 0x00FF00
    DEGRADED_COLOR = 0xFFAA00

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, webhook_url: Optional[str] = None):
        self.webhook_url = webhook_url if webhook_url is not None else get_settings().discord_webhook_url
        self._http_client = http_client

    @staticmethod
    def _lines(analysis: NutritionAnalysis, rows) -> List[str]:
        lines = []
        for field_name, label, unit in rows:
            value = getattr(analysis, field_name)
            if value:
                lines.append(f"{label}: {value:g}{unit}")
        return lines

    @classmethod
    def build_payload(
        cls,
        photo: PhotoData,
        upload: UploadedFile,
        analysis: Optional[NutritionAnalysis],
    ) -> Dict[str, Any]:
        """Format a photo and its analysis as a Discord webhook message."""
        fields: List[Dict[str, Any]] = [
            {"name": "Timestamp", "value": photo.timestamp.isoformat(), "inline": True},
            {"name": "File Size", "value": f"{photo.size / 1024:.2f} KB", "inline": True},
            {"name": "MIME Type", "value": photo.mime_type, "inline": True},
            {"name": "CDN URL", "value": upload.url, "inline": False},
            {"name": "File Key", "value": upload.key, "inline": True},
        ]

        if analysis is not None:
            fields.append({"name": "Food Description", "value": analysis.description or "N/A", "inline": False})

            macros = cls._lines(analysis, MACRO_LINES)
            if macros:
                fields.append({"name": "Macronutrients", "value": "\n".join(macros), "inline": True})

            vitamins = [
                f"{name.upper()}: {getattr(analysis, f'vitamin_{name}'):g}g"
                for name in VITAMIN_NAMES
                if getattr(analysis, f"vitamin_{name}")
            ]
            if vitamins:
                fields.append({"name": "Vitamins", "value": "\n".join(vitamins), "inline": True})

            minerals = cls._lines(analysis, MINERAL_LINES)
            if minerals:
                fields.append({"name": "Minerals", "value": "\n".join(minerals), "inline": True})
        else:
            fields.append({"name": "AI Analysis", "value": "Nutrition analysis failed", "inline": False})

        content = f"New photo from user {photo.user_id}"
        if analysis is not None:
            content += " - nutrition analysis completed"

        return {
            "content": content,
            "embeds": [
                {
                    "title": "Photo + AI Nutrition Analysis" if analysis is not None else "Photo Details",
                    "fields": fields,
                    "image": {"url": upload.url},
                    "timestamp": photo.timestamp.isoformat(),
                    "color": cls.SUCCESS_COLOR if analysis is not None else cls.DEGRADED_COLOR,
                }
            ],
        }

    async def notify(
        self,
        photo: PhotoData,
        upload: UploadedFile,
        analysis: Optional[NutritionAnalysis],
    ) -> None:
        if not self.webhook_url:
            logger.debug("Discord webhook not configured, skipping notification")
            return

        payload = self.build_payload(photo, upload, analysis)
        client = self._http_client or httpx.AsyncClient(timeout=10.0)
        try:
            response = await client.post(self.webhook_url, json=payload)
            if response.status_code >= 400:
                logger.warning(f"Discord webhook returned {response.status_code}: {response.text[:200]}")
            else:
                logger.info(f"Photo {photo.request_id} posted to Discord")
        except Exception as e:
            logger.warning(f"Failed to send Discord notification for photo {photo.request_id}: {e}")
        finally:
            if client is not self._http_client:
                await client.aclose()
