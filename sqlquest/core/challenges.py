import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from sqlquest.core.engine.introspector import SchemaIntrospector
from sqlquest.core.engine.session import ChallengeSession


# -----------------------------------------------------------------------------
# CHALLENGE CATALOG
# Purpose: the phases a learner can open, each with its own validator
# Why: validators are code, so phases live server-side and are opened by key
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ChallengeDefinition:
    key: str
    title: str
    prompt: str
    allowed_operation: str
    validator: Optional[Callable] = None
    challenge_index: int = -1
    success_message: Optional[str] = None
    auto_close_delay: Optional[float] = None
    auto_close_on_success: bool = True

    def to_session(self) -> ChallengeSession:
        return ChallengeSession.build(
            allowed_operation=self.allowed_operation,
            validator=self.validator,
            success_message=self.success_message,
            auto_close_delay=self.auto_close_delay,
            auto_close_on_success=self.auto_close_on_success,
            challenge_index=self.challenge_index,
        )


# =========================
# Validators
# =========================
def toys_table_created(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    columns = {c.name.lower(): c for c in schema.columns("toys")}
    if not {"id", "name", "category", "color"} <= columns.keys():
        return False
    return columns["id"].is_primary_key and columns["name"].not_null


def three_toys_inserted(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    return schema.row_count("toys") == 3


def one_toy_recolored(sql: str, affected: int) -> bool:
    # Exactly one toy, and the statement must actually touch the color column
    return affected == 1 and re.search(r"\bcolor\b", sql, re.IGNORECASE) is not None


def inactive_toys_removed(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    remaining = schema.scalar_count("SELECT COUNT(*) FROM toys WHERE active = 0")
    return affected >= 1 and remaining == 0


def price_column_added(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    return any(c.name.lower() == "price" for c in schema.columns("toys"))


def unique_toy_names(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    return any(
        [c.lower() for c in idx.columns] == ["name"] for idx in schema.unique_indexes("toys")
    )


def sales_reference_toys(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    return any(
        fk.parent_table.lower() == "toys" and fk.child_column.lower() == "toy_id"
        for fk in schema.foreign_keys("sales")
    )


def old_toys_dropped(sql: str, affected: int, schema: SchemaIntrospector) -> bool:
    return not schema.table_exists("old_toys")


CHALLENGES: List[ChallengeDefinition] = [
    ChallengeDefinition(
        key="create-toys",
        title="A place for the toys",
        prompt=(
            "Create a table toys with an integer primary key id, a required "
            "name, and the columns category and color."
        ),
        allowed_operation="CREATE",
        validator=toys_table_created,
        challenge_index=0,
    ),
    ChallengeDefinition(
        key="insert-toys",
        title="Stocking the shelves",
        prompt="Insert toys until the toys table holds exactly three of them.",
        allowed_operation="INSERT",
        validator=three_toys_inserted,
        challenge_index=1,
    ),
    ChallengeDefinition(
        key="recolor-toy",
        title="A fresh coat of paint",
        prompt="Change the color of exactly one toy.",
        allowed_operation="UPDATE",
        validator=one_toy_recolored,
        challenge_index=2,
    ),
    ChallengeDefinition(
        key="remove-inactive",
        title="Spring cleaning",
        prompt="Delete every toy whose active flag is 0.",
        allowed_operation="DELETE",
        validator=inactive_toys_removed,
        challenge_index=3,
    ),
    ChallengeDefinition(
        key="add-price",
        title="Price tags",
        prompt="Add a price column to the toys table.",
        allowed_operation="ALTER",
        validator=price_column_added,
        challenge_index=4,
    ),
    ChallengeDefinition(
        key="unique-names",
        title="No twins allowed",
        prompt="Make toy names unique with a unique index on toys(name).",
        allowed_operation="CREATE",
        validator=unique_toy_names,
        challenge_index=5,
    ),
    ChallengeDefinition(
        key="create-sales",
        title="Keeping the books",
        prompt="Create a sales table whose toy_id column references toys(id).",
        allowed_operation="CREATE",
        validator=sales_reference_toys,
        challenge_index=6,
    ),
    ChallengeDefinition(
        key="drop-old-toys",
        title="Out with the old",
        prompt="Drop the old_toys table.",
        allowed_operation="DROP",
        validator=old_toys_dropped,
        challenge_index=7,
    ),
]

CATALOG: Dict[str, ChallengeDefinition] = {c.key: c for c in CHALLENGES}


def get_challenge(key: str) -> Optional[ChallengeDefinition]:
    return CATALOG.get(key)
