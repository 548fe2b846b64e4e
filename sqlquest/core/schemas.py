from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =========================
# Enums
# =========================
class SubmissionState(str, Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    ERRORED = "errored"
    REJECTED = "rejected"


class Operation(str, Enum):
    CREATE = "CREATE"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALTER = "ALTER"
    DROP = "DROP"


# =========================
# SCHEMA METADATA
# =========================
class TableColumn(BaseModel):
    """One row of PRAGMA table_info."""

    ordinal: int
    name: str
    declared_type: str = ""
    not_null: bool = False
    default_value: Optional[str] = None
    is_primary_key: bool = False

    model_config = ConfigDict(frozen=True)


class ForeignKeyRef(BaseModel):
    """One row of PRAGMA foreign_key_list (one per column mapping)."""

    id: int
    sequence: int
    parent_table: str
    child_column: str
    parent_column: Optional[str] = None  # NULL when the FK targets the parent's PK
    on_update: str = "NO ACTION"
    on_delete: str = "NO ACTION"
    match: str = "NONE"

    model_config = ConfigDict(frozen=True)


class UniqueIndex(BaseModel):
    name: str
    columns: List[str] = []

    model_config = ConfigDict(frozen=True)


# =========================
# SUBMISSION
# =========================
class ExecutionOutcome(BaseModel):
    state: SubmissionState
    affected_row_count: int = 0
    committed: bool = False
    error_message: Optional[str] = None
    message: str = ""


class StatementSubmit(BaseModel):
    sql: str = Field(default="", max_length=10_000)


# =========================
# CONSOLE / CATALOG
# =========================
class ConsoleState(BaseModel):
    is_open: bool
    challenge_key: Optional[str] = None
    prompt: Optional[str] = None
    allowed_operation: Optional[str] = None
    feedback: str = ""


class ChallengeResponse(BaseModel):
    key: str
    title: str
    prompt: str
    allowed_operation: Optional[Operation] = None
    challenge_index: int = -1


class ProgressResponse(BaseModel):
    completed: List[int] = []
