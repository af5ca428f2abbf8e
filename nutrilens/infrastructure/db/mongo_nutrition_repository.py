# Standard library imports
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# External package imports
from motor.motor_asyncio import AsyncIOMotorCollection

# Local application imports
from ...domain.repositories.nutrition_repository import NutritionRepository
from ...domain.models.nutrition import NutritionAnalysis, NutritionRecord
from ...domain.constants import NutritionFields
from .mongo_connection import get_nutrition_collection

logger = logging.getLogger(__name__)


class MongoNutritionRepository(NutritionRepository):
    """MongoDB implementation of NutritionRepository"""

    def __init__(self, nutrition_collection: Optional[AsyncIOMotorCollection] = None) -> None:
        self.nutrition_collection = (
            nutrition_collection if nutrition_collection is not None else get_nutrition_collection()
        )

    async def insert(self, record: NutritionRecord) -> bool:
        """
        Insert a nutrition record.

        Database errors are logged and reported as False so a failed write
        never aborts the photo pipeline.
        """
        document = self._record_to_document(record)
        try:
            result = await self.nutrition_collection.insert_one(document)
        except Exception as e:
            logger.error(f"Error inserting nutrition data: {e}", exc_info=True)
            return False

        logger.info(f"Nutrition data inserted with id {result.inserted_id}")
        return True

    async def list_recent(self, limit: int = 10) -> List[NutritionRecord]:
        if limit <= 0:
            raise ValueError("Limit must be positive")

        try:
            cursor = (
                self.nutrition_collection.find({})
                .sort(NutritionFields.TIMESTAMP, -1)
                .limit(limit)
            )
            documents = await cursor.to_list(length=limit)
        except Exception as e:
            raise RuntimeError(f"Error listing nutrition records: {str(e)}")

        # Records written without an image link cannot be shown
        return [
            self._document_to_record(document)
            for document in documents
            if document.get(NutritionFields.IMG_URL)
        ]

    def _record_to_document(self, record: NutritionRecord) -> Dict[str, Any]:
        # Unset values are left out of the document
        document: Dict[str, Any] = {
            name: value
            for name, value in record.analysis.to_dict().items()
            if value is not None
        }
        document[NutritionFields.IMG_URL] = record.img_url
        document[NutritionFields.TIMESTAMP] = record.timestamp
        if record.user_id:
            document[NutritionFields.USER_ID] = record.user_id
        return document

    def _document_to_record(self, document: Dict[str, Any]) -> NutritionRecord:
        analysis = NutritionAnalysis.from_dict(document)
        timestamp = document.get(NutritionFields.TIMESTAMP)
        if not isinstance(timestamp, datetime):
            timestamp = datetime.now(timezone.utc)
        return NutritionRecord(
            analysis=analysis,
            img_url=document[NutritionFields.IMG_URL],
            user_id=document.get(NutritionFields.USER_ID),
            timestamp=timestamp,
            id=str(document[NutritionFields.MONGO_ID]) if document.get(NutritionFields.MONGO_ID) else None,
        )
