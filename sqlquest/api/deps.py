from typing import Annotated

from fastapi import Depends, Request

from sqlquest.core.console import ConsolePanel, ProgressTracker
from sqlquest.core.engine.controller import ChallengeController


# The lifespan in sqlquest.main puts one of each on app.state
def get_controller(request: Request) -> ChallengeController:
    return request.app.state.controller


def get_panel(request: Request) -> ConsolePanel:
    return request.app.state.panel


def get_progress(request: Request) -> ProgressTracker:
    return request.app.state.progress


controller_dep = Annotated[ChallengeController, Depends(get_controller)]
panel_dep = Annotated[ConsolePanel, Depends(get_panel)]
progress_dep = Annotated[ProgressTracker, Depends(get_progress)]
