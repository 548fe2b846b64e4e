import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from sqlquest.core.config import settings
from sqlquest.core.database import engine, run_schema_script
from sqlquest.core.challenges import CHALLENGES
from sqlquest.core.console import ConsolePanel, ProgressTracker
from sqlquest.core.engine.controller import ChallengeController
from sqlquest.api.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# One connection for the whole run: acquired here, released when the app stops
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.connect() as conn:
        if settings.SCHEMA_SCRIPT:
            count = await run_schema_script(conn, settings.SCHEMA_SCRIPT)
            logger.info(f"Setup script applied ({count} statements)")

        panel = ConsolePanel()
        progress = ProgressTracker(slots=len(CHALLENGES))
        controller = ChallengeController(
            conn,
            report_feedback=panel.report_feedback,
            request_close=panel.request_close,
            mark_complete=progress.mark_complete,
        )
        app.state.panel = panel
        app.state.progress = progress
        app.state.controller = controller

        yield

        controller.cancel_close()
    await engine.dispose()


app = FastAPI(title="SQL Quest Challenge API", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the SQL Quest challenge console"}
