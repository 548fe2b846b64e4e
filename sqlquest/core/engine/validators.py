import inspect
from dataclasses import dataclass
from typing import Callable, Optional, Union

from sqlquest.core.engine.introspector import SchemaIntrospector
from sqlquest.core.errors import ValidatorInvocationError


# =========================
# Validator shapes
# =========================
@dataclass(frozen=True)
class ValidatorWithSchema:
    """(sql, affected_rows, schema) -> bool"""

    fn: Callable[[str, int, SchemaIntrospector], bool]


@dataclass(frozen=True)
class ValidatorBasic:
    """(sql, affected_rows) -> bool"""

    fn: Callable[[str, int], bool]


@dataclass(frozen=True)
class ValidatorCountOnly:
    """(affected_rows) -> bool"""

    fn: Callable[[int], bool]


Validator = Union[ValidatorWithSchema, ValidatorBasic, ValidatorCountOnly]

_SHAPES = {3: ValidatorWithSchema, 2: ValidatorBasic, 1: ValidatorCountOnly}


def as_validator(func: Union[Callable, Validator, None]) -> Optional[Validator]:
    """
    Wrap a plain callable in the variant matching its positional arity.

    Every declared positional parameter counts, defaulted ones included,
    so `(sql, affected, schema=None)` is treated as a schema validator.

    Done once when the phase is configured so submissions never have to
    reflect over the callable again. Already-wrapped validators pass through.

    Example:
        as_validator(lambda affected: affected == 3)  # ValidatorCountOnly
    """
    if func is None or isinstance(func, (ValidatorWithSchema, ValidatorBasic, ValidatorCountOnly)):
        return func

    params = [
        p
        for p in inspect.signature(func).parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    shape = _SHAPES.get(len(params))
    if shape is None:
        raise TypeError(
            f"Validator must take 1, 2 or 3 positional arguments, got {len(params)}"
        )
    return shape(func)


def dispatch(
    validator: Optional[Validator],
    sql: str,
    affected: int,
    schema: SchemaIntrospector,
) -> bool:
    """
    Call the validator with the arguments its shape expects.

    No validator means any statement that executed cleanly passes.
    Anything the validator raises comes back as ValidatorInvocationError.
    """
    if validator is None:
        return True

    try:
        match validator:
            case ValidatorWithSchema(fn):
                verdict = fn(sql, affected, schema)
            case ValidatorBasic(fn):
                verdict = fn(sql, affected)
            case ValidatorCountOnly(fn):
                verdict = fn(affected)
            case _:
                raise TypeError(f"Unknown validator type: {type(validator).__name__}")
    except Exception as error:
        raise ValidatorInvocationError(str(error) or type(error).__name__) from error

    return bool(verdict)
