# External package imports
from fastapi import APIRouter

# Local application imports
from ...application.dto.session_dto import WorkerStats, WorkerStatsResponse
from ...di.container import get_container
from ...processing.worker.worker_manager import WorkerManager


router = APIRouter(tags=["workers"])


@router.get("/stats", response_model=WorkerStatsResponse)
async def get_worker_stats() -> WorkerStatsResponse:
    """Active worker types and the number of tasks pending on each"""
    worker_manager = get_container().get(WorkerManager)
    stats = worker_manager.get_stats()
    return WorkerStatsResponse(
        workers={worker_type: WorkerStats(**entry) for worker_type, entry in stats.items()}
    )
