from typing import List

from fastapi import APIRouter, HTTPException, status

from sqlquest.core import schemas
from sqlquest.core.challenges import CHALLENGES, ChallengeDefinition, get_challenge
from sqlquest.api.deps import controller_dep, panel_dep

router = APIRouter(prefix="/challenges", tags=["Challenges"])


def _lookup(key: str) -> ChallengeDefinition:
    challenge = get_challenge(key)
    if challenge is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"Challenge '{key}' not found")
    return challenge


def _to_response(challenge: ChallengeDefinition) -> schemas.ChallengeResponse:
    return schemas.ChallengeResponse(
        key=challenge.key,
        title=challenge.title,
        prompt=challenge.prompt,
        allowed_operation=challenge.allowed_operation,
        challenge_index=challenge.challenge_index,
    )


@router.get("", response_model=List[schemas.ChallengeResponse])
async def list_challenges():
    return [_to_response(c) for c in CHALLENGES]


@router.get("/{key}", response_model=schemas.ChallengeResponse)
async def get_challenge_details(key: str):
    return _to_response(_lookup(key))


# Opening a phase replaces whatever phase was open before
@router.post("/{key}/open", response_model=schemas.ConsoleState)
async def open_challenge(key: str, controller: controller_dep, panel: panel_dep):
    challenge = _lookup(key)
    session = challenge.to_session()

    controller.open_phase(session)
    panel.show(challenge.key, challenge.prompt, session.allowed_operation)
    return panel.snapshot()
