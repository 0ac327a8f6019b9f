"""
Score aggregation: raw 1–5 Likert answers → one integer total per facet.

Payload shape (as posted by the assessment forms):
  {"stage": "PR",
   "risci": {"stress": [..], "coping": [..]},
   "sma":   {"planning": [..], "reframing": [..], "healthy": [..]},
   "pssm":  [..]                      # or {"self_efficacy": [..]}
   "pdsm":  {"pros": [..], "cons": [..]},
   "ppsm":  {"experiential": [..], "behavioral": [..]}}
Unanswered items are null until submission.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .catalog import LIKERT_MAX, LIKERT_MIN, CatalogStore
from .dimensions import Stage, SubDimension
from .errors import InvalidInputShape

NEUTRAL_ANSWER = 3

# The forms post SMA healthy activity as "healthy"
_PAYLOAD_ALIASES = {SubDimension.SMA_HEALTHY_ACTIVITY: ("healthy_activity", "healthy")}


def _payload_keys(dim: SubDimension) -> tuple[str, ...]:
    return _PAYLOAD_ALIASES.get(dim, (dim.key,))


def _section(payload: dict, dim: SubDimension):
    section = payload.get(dim.questionnaire.lower())
    if section is None:
        section = payload.get(dim.questionnaire)
    # PSSM has a single facet and may be posted as a bare list
    if dim is SubDimension.PSSM_SELF_EFFICACY and isinstance(section, list):
        return section
    if not isinstance(section, dict):
        return None
    for key in _payload_keys(dim):
        if key in section:
            return section[key]
    return None


def _parse_stage(value) -> Stage:
    try:
        return Stage.parse(value)
    except ValueError as e:
        raise InvalidInputShape(str(e)) from None


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class RawAnswers:
    stage: Stage
    answers: Mapping[SubDimension, tuple]

    @classmethod
    def from_payload(cls, payload: dict) -> "RawAnswers":
        if not isinstance(payload, dict):
            raise InvalidInputShape("answers payload must be an object")
        answers = {}
        for dim in SubDimension:
            items = _section(payload, dim)
            if items is None:
                raise InvalidInputShape(f"{dim.path}: answers missing")
            if not isinstance(items, (list, tuple)):
                raise InvalidInputShape(f"{dim.path}: answers must be a list")
            answers[dim] = tuple(items)
        return cls(stage=_parse_stage(payload.get("stage")), answers=MappingProxyType(answers))

    def missing_items(self) -> dict[str, list[int]]:
        """Zero-based positions still unanswered, keyed by facet path."""
        out: dict[str, list[int]] = {}
        for dim, items in self.answers.items():
            gaps = [i for i, v in enumerate(items) if v is None]
            if gaps:
                out[dim.path] = gaps
        return out

    def is_complete(self) -> bool:
        return not self.missing_items()

    def to_payload(self) -> dict:
        out: dict = {"stage": self.stage.value}
        for dim, items in self.answers.items():
            out.setdefault(dim.questionnaire.lower(), {})[dim.key] = list(items)
        return out


@dataclass(frozen=True)
class Scores:
    stage: Stage
    totals: Mapping[SubDimension, int]

    def __getitem__(self, dim: SubDimension) -> int:
        return self.totals[dim]

    @classmethod
    def from_payload(cls, payload: dict) -> "Scores":
        """Parse the submission shape {"stage", "pssm": {"self_efficacy": 17}, ...}."""
        if not isinstance(payload, dict):
            raise InvalidInputShape("scores payload must be an object")
        totals = {}
        for dim in SubDimension:
            value = _section(payload, dim)
            if not _is_int(value):
                raise InvalidInputShape(f"{dim.path}: total must be an integer, got {value!r}")
            totals[dim] = value
        return cls(stage=_parse_stage(payload.get("stage")), totals=MappingProxyType(totals))

    def check_ranges(self, catalog: CatalogStore) -> None:
        """Reject totals no set of 1–5 answers could produce for this catalog."""
        for dim in SubDimension:
            banding = catalog.banding(dim)
            value = self.totals[dim]
            if not banding.min_score <= value <= banding.max_score:
                raise InvalidInputShape(
                    f"{dim.path}: total {value} outside {banding.min_score}..{banding.max_score}"
                )

    def to_payload(self) -> dict:
        out: dict = {"stage": self.stage.value}
        for dim in SubDimension:
            out.setdefault(dim.questionnaire.lower(), {})[dim.key] = self.totals[dim]
        return out


def aggregate_scores(raw: RawAnswers, catalog: CatalogStore) -> Scores:
    """Sum every facet's answers. All items must be answered and match the catalog's item count."""
    totals = {}
    for dim in SubDimension:
        items = raw.answers.get(dim)
        if items is None:
            raise InvalidInputShape(f"{dim.path}: answers missing")
        expected = catalog.item_count(dim)
        if len(items) != expected:
            raise InvalidInputShape(f"{dim.path}: expected {expected} answers, got {len(items)}")
        unanswered = [i for i, v in enumerate(items) if v is None]
        if unanswered:
            raise InvalidInputShape(f"{dim.path}: unanswered items at {unanswered}")
        for v in items:
            if not _is_int(v) or not LIKERT_MIN <= v <= LIKERT_MAX:
                raise InvalidInputShape(f"{dim.path}: answer {v!r} is not a {LIKERT_MIN}-{LIKERT_MAX} Likert value")
        totals[dim] = sum(items)
    return Scores(stage=raw.stage, totals=MappingProxyType(totals))


def default_answers(
    catalog: CatalogStore,
    stage: Stage = Stage.C,
    fill: Optional[int] = NEUTRAL_ANSWER,
) -> RawAnswers:
    """Starting form state: every item neutral (or None for a blank form)."""
    answers = {dim: tuple([fill] * catalog.item_count(dim)) for dim in SubDimension}
    return RawAnswers(stage=stage, answers=MappingProxyType(answers))


__all__ = ["RawAnswers", "Scores", "aggregate_scores", "default_answers", "NEUTRAL_ANSWER"]
