from fastapi import APIRouter

from sqlquest.core import schemas
from sqlquest.api.deps import progress_dep

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.get("", response_model=schemas.ProgressResponse)
async def get_progress(progress: progress_dep):
    return schemas.ProgressResponse(completed=progress.completed())
