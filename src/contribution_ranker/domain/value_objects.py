"""Value objects: self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping

from contribution_ranker.domain.entities import SkillLevel, SkillProfile
from contribution_ranker.domain.exceptions import (
    InvalidSkillProfileError,
    InvalidSnapshotIdError,
)

_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:@/\-]{0,199}$")


def _validate_id(value: str, kind: str) -> str:
    value = value.strip()
    if not _ID_RE.match(value):
        raise InvalidSnapshotIdError(
            f"Invalid {kind}: '{value}'. "
            "Expected 1-200 characters: letters, digits, '_', '.', ':', '@', '/' or '-'."
        )
    return value


@dataclass(frozen=True, slots=True)
class ResultKey:
    """Key of one immutable result set: (repository snapshot id, user id).

    Repository-level results (graph, centrality, complexity) use
    ``user_id=None``.
    """

    snapshot_id: str
    user_id: str | None = None

    @classmethod
    def for_snapshot(cls, snapshot_id: str) -> ResultKey:
        return cls(snapshot_id=_validate_id(snapshot_id, "snapshot id"))

    @classmethod
    def for_user(cls, snapshot_id: str, user_id: str) -> ResultKey:
        return cls(
            snapshot_id=_validate_id(snapshot_id, "snapshot id"),
            user_id=_validate_id(user_id, "user id"),
        )


def parse_skill_profile(
    user_id: str, confidences: Mapping[str, float]
) -> SkillProfile:
    """Build a :class:`SkillProfile` from a ``{language: confidence}`` mapping.

    Language tags are matched case-insensitively.  Confidence values must be
    one of 0.25, 0.5, 0.75 or 1.0; a language that is simply absent means
    "no skill".
    """
    skills: dict[str, SkillLevel] = {}
    for language, confidence in confidences.items():
        tag = language.strip().lower()
        if not tag:
            raise InvalidSkillProfileError("Skill profile contains an empty language tag.")
        try:
            skills[tag] = SkillLevel.from_confidence(float(confidence))
        except (TypeError, ValueError) as exc:
            raise InvalidSkillProfileError(
                f"Invalid confidence {confidence!r} for language '{language}'. "
                "Expected one of 0.25, 0.5, 0.75, 1.0."
            ) from exc
    return SkillProfile(user_id=_validate_id(user_id, "user id"), skills=skills)
