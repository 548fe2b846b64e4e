import logging
from typing import Optional, Set

from sqlquest.core.schemas import ConsoleState

logger = logging.getLogger(__name__)


# =========================
# Console panel
# =========================
class ConsolePanel:
    """
    Server-side stand-in for the on-screen SQL console.

    The controller only talks to it through report_feedback / request_close,
    clients read it back through GET /console.
    """

    def __init__(self):
        self.is_open = False
        self.feedback = ""
        self.challenge_key: Optional[str] = None
        self.prompt: Optional[str] = None
        self.allowed_operation: Optional[str] = None

    def show(self, challenge_key: str, prompt: str, allowed_operation: Optional[str]):
        self.is_open = True
        self.challenge_key = challenge_key
        self.prompt = prompt
        self.allowed_operation = allowed_operation

    def report_feedback(self, message: str):
        self.feedback = message

    def request_close(self):
        self.is_open = False
        self.challenge_key = None
        self.prompt = None
        self.allowed_operation = None

    def snapshot(self) -> ConsoleState:
        return ConsoleState(
            is_open=self.is_open,
            challenge_key=self.challenge_key,
            prompt=self.prompt,
            allowed_operation=self.allowed_operation,
            feedback=self.feedback,
        )


# =========================
# Progress
# =========================
class ProgressTracker:
    """Completed challenge slots for the running process (not persisted)."""

    def __init__(self, slots: int):
        self.slots = slots
        self._completed: Set[int] = set()

    def mark_complete(self, index: int):
        if index < 0 or index >= self.slots:
            raise IndexError(f"Challenge index {index} out of range (0..{self.slots - 1})")
        self._completed.add(index)
        logger.info(f"Challenge {index} marked complete")

    def is_complete(self, index: int) -> bool:
        return index in self._completed

    def completed(self):
        return sorted(self._completed)
