"""
Nutrient Reminder — Ingredient Conflict Checker.

Warns before an alarm is saved when another active alarm within a couple of
minutes contains an ingredient known to interfere with the new one.

The interaction table is data, loaded from a JSON file (src/data/conflicts.json
by default) so it can be swapped or localized without code changes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field, ValidationError

from src.core.time_format import FormatError, minute_difference
from src.data.models import AlarmRecord

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT_DATA = Path(__file__).resolve().parent.parent / "data" / "conflicts.json"


class ConflictRule(BaseModel):
    """A known interaction with a human-readable explanation.

    Matches when any keyword pair is found in the two names (either order).
    requires_any, if set, must also appear in at least one of the names.
    """
    pairs: list[tuple[str, str]]
    message: str
    requires_any: str | None = None


class ConflictTable(BaseModel):
    keywords: dict[str, list[str]] = Field(default_factory=dict)
    rules: list[ConflictRule] = Field(default_factory=list)


def has_pair(name1: str, name2: str, k1: str, k2: str) -> bool:
    """True if one name contains k1 and the other contains k2 (either order).

    Matching is case-sensitive substring containment.
    """
    return (k1 in name1 and k2 in name2) or (k2 in name1 and k1 in name2)


class ConflictKnowledgeBase:
    """Keyword interaction map plus explanation rules."""

    def __init__(self, table: ConflictTable) -> None:
        self._table = table

    @classmethod
    def load(cls, path: str | Path | None = None) -> ConflictKnowledgeBase:
        """Load and validate a conflict table from JSON.

        Raises ValueError if the file is missing or malformed.
        """
        if path is None:
            from src.config import settings
            path = settings.CONFLICT_DATA_PATH or DEFAULT_CONFLICT_DATA

        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
            table = ConflictTable.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"Invalid conflict table {path}: {exc}") from exc

        logger.debug(
            "Loaded %d conflict keywords and %d rules from %s",
            len(table.keywords), len(table.rules), path,
        )
        return cls(table)

    @property
    def rules(self) -> list[ConflictRule]:
        return list(self._table.rules)

    def conflicting_keywords(self, name: str) -> set[str]:
        """All keywords listed as conflicting with any keyword found in name."""
        result: set[str] = set()
        for keyword, others in self._table.keywords.items():
            if keyword in name:
                result.update(others)
        return result

    def keywords_conflict(self, name_a: str, name_b: str) -> bool:
        """True if the keyword map links the two names in either direction."""
        for keyword, others in self._table.keywords.items():
            if keyword in name_a and any(o in name_b for o in others):
                return True
            if keyword in name_b and any(o in name_a for o in others):
                return True
        return False

    def conflict_message(self, name_a: str, name_b: str) -> str | None:
        """Explanation for the first rule matching the two names, else None.

        The keyword map alone never produces a message.
        """
        for rule in self._table.rules:
            if not any(has_pair(name_a, name_b, k1, k2) for k1, k2 in rule.pairs):
                continue
            if rule.requires_any and not (
                rule.requires_any in name_a or rule.requires_any in name_b
            ):
                continue
            return rule.message
        return None


def _within_window(t1: str, t2: str, window_minutes: int) -> bool:
    try:
        return minute_difference(t1, t2) <= window_minutes
    except FormatError as exc:
        logger.warning("Skipping conflict check for unparseable time: %s", exc)
        return False


def check_conflict(
    records: Iterable[AlarmRecord],
    candidate_name: str,
    candidate_time: str,
    knowledge_base: ConflictKnowledgeBase,
    window_minutes: int = 2,
    exclude_id: str | None = None,
) -> str | None:
    """Return a warning if a nearby active alarm interacts with the candidate.

    Scans ACTIVE/SNOOZED records whose scheduled time is within
    window_minutes (inclusive) of candidate_time and returns the first
    non-null explanation. Advisory only: callers warn, they do not block.

    Args:
        records: Alarm records to scan (usually a store snapshot).
        candidate_name: Name of the alarm about to be saved.
        candidate_time: Its time string, e.g. "오전 08 : 00".
        knowledge_base: Source of interaction explanations.
        window_minutes: Maximum absolute time difference that counts.
        exclude_id: Record to skip (self-exclusion when editing).
    """
    for record in records:
        if not record.status.triggerable:
            continue
        if exclude_id is not None and record.id == exclude_id:
            continue
        if not _within_window(candidate_time, record.scheduled_time, window_minutes):
            continue
        message = knowledge_base.conflict_message(candidate_name, record.name)
        if message is not None:
            return message
    return None
