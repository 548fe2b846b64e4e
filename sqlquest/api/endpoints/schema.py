import logging
from typing import Any, Callable, List

from fastapi import APIRouter, HTTPException, status

from sqlquest.core import schemas
from sqlquest.core.engine.controller import ChallengeController
from sqlquest.core.engine.introspector import SchemaIntrospector
from sqlquest.core.errors import InvalidIdentifier
from sqlquest.api.deps import controller_dep

router = APIRouter(prefix="/schema", tags=["Schema"])


async def _inspect(
    controller: ChallengeController, fn: Callable[[SchemaIntrospector], Any]
):
    try:
        return await controller.inspect(fn)
    except InvalidIdentifier as error:
        logging.warning(f"Rejected identifier: {error.identifier!r}")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(error))


@router.get("/{table}/columns", response_model=List[schemas.TableColumn])
async def get_columns(table: str, controller: controller_dep):
    columns = await _inspect(controller, lambda schema: schema.columns(table))
    if not columns:
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"Table '{table}' not found")
    return columns


@router.get("/{table}/foreign-keys", response_model=List[schemas.ForeignKeyRef])
async def get_foreign_keys(table: str, controller: controller_dep):
    return await _inspect(controller, lambda schema: schema.foreign_keys(table))


@router.get("/{table}/unique-indexes", response_model=List[schemas.UniqueIndex])
async def get_unique_indexes(table: str, controller: controller_dep):
    return await _inspect(controller, lambda schema: schema.unique_indexes(table))
