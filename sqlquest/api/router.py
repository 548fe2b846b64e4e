from fastapi import APIRouter
from sqlquest.api.endpoints import challenges, console, schema, progress

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(challenges.router)
api_router.include_router(console.router)
api_router.include_router(schema.router)
api_router.include_router(progress.router)
