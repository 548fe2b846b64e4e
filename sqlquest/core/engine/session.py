from dataclasses import dataclass
from typing import Callable, Optional, Union

from sqlquest.core.config import settings
from sqlquest.core.engine.classifier import SUPPORTED_OPERATIONS
from sqlquest.core.engine.validators import Validator, as_validator


@dataclass(frozen=True)
class ChallengeSession:
    """
    Configuration of one challenge phase.

    Frozen on purpose: opening a new phase swaps the whole value on the
    controller, fields are never patched one by one.
    """

    allowed_operation: Optional[str] = None  # None accepts any non-SELECT operation
    validator: Optional[Validator] = None
    success_message: str = ""
    auto_close_delay: float = 1.0
    auto_close_on_success: bool = True
    challenge_index: int = -1

    @classmethod
    def build(
        cls,
        allowed_operation: Optional[str] = None,
        validator: Union[Callable, Validator, None] = None,
        success_message: Optional[str] = None,
        auto_close_delay: Optional[float] = None,
        auto_close_on_success: bool = True,
        challenge_index: int = -1,
    ) -> "ChallengeSession":
        """Normalize raw phase settings (blank message, negative delay, op casing)."""
        op = (allowed_operation or "").strip().upper() or None
        if op is not None and op not in SUPPORTED_OPERATIONS:
            raise ValueError(f"Unsupported phase operation: {allowed_operation}")

        if auto_close_delay is None:
            auto_close_delay = settings.DEFAULT_CLOSE_DELAY_SECONDS

        return cls(
            allowed_operation=op,
            validator=as_validator(validator),
            success_message=(success_message or "").strip()
            or settings.DEFAULT_SUCCESS_MESSAGE,
            auto_close_delay=max(0.0, float(auto_close_delay)),
            auto_close_on_success=auto_close_on_success,
            challenge_index=challenge_index,
        )

    @classmethod
    def legacy(cls, validator: Union[Callable, Validator, None] = None) -> "ChallengeSession":
        """Old-style open: any DDL/DML, default message, 1s auto close, no progress slot."""
        return cls.build(
            validator=validator,
            auto_close_delay=1.0,
            auto_close_on_success=True,
            challenge_index=-1,
        )
