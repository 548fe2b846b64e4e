from fastapi import APIRouter, status

from sqlquest.core import schemas
from sqlquest.api.deps import controller_dep, panel_dep

router = APIRouter(prefix="/console", tags=["Console"])


@router.get("", response_model=schemas.ConsoleState)
async def get_console(panel: panel_dep):
    return panel.snapshot()


@router.post(
    "/execute",
    response_model=schemas.ExecutionOutcome,
    status_code=status.HTTP_200_OK,
)
async def execute_statement(payload: schemas.StatementSubmit, controller: controller_dep):
    """
    Grade one statement against the open phase.
    Failures come back as an outcome (rejected / rolled_back / errored), not as HTTP errors.
    """
    return await controller.submit(payload.sql)


@router.post("/close", response_model=schemas.ConsoleState)
async def close_console(controller: controller_dep, panel: panel_dep):
    controller.close()
    return panel.snapshot()
