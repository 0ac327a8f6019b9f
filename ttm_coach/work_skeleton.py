from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from typing import Optional

from .banding import Bands, band_labels, classify, stage_name
from .catalog import CatalogStore
from .debug_utils import debug_log
from .dimensions import SMA_DIMENSIONS, Stage, SubDimension
from .scoring import RawAnswers, Scores, aggregate_scores
from .skeleton_content import (
    BASE_SKELETONS,
    FRAGMENT_PROS_BOOST,
    FRAGMENT_SELF_EFFICACY_LOW,
    FRAGMENT_STRESS_HIGH,
    SKELETON_VERSION,
    SMA_FOCUS_FRAGMENTS,
)

MAX_WEEKLY_CARDS = 7


@dataclass
class SkeletonCard:
    id: str
    type: str
    title: str
    checklist: list = field(default_factory=list)
    when: str = ""
    trigger_if_then: str = ""
    est_minutes: int = 0
    required: bool = True

    @classmethod
    def from_dict(cls, raw: dict) -> "SkeletonCard":
        return cls(
            id=raw["id"],
            type=raw.get("type", ""),
            title=raw.get("title", ""),
            checklist=list(raw.get("checklist") or []),
            when=raw.get("when", ""),
            trigger_if_then=raw.get("trigger_if_then", ""),
            est_minutes=int(raw.get("est_minutes") or 0),
            required=bool(raw.get("required", True)),
        )


@dataclass
class Obstacle:
    obstacle: str
    plan_hint: str


@dataclass
class TodayAction:
    id: str
    est_minutes: int
    steps: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict) -> "TodayAction":
        return cls(id=raw["id"], est_minutes=int(raw.get("est_minutes") or 0), steps=list(raw.get("steps") or []))


@dataclass
class MotivationHints:
    pros: list = field(default_factory=list)
    reframing: list = field(default_factory=list)


@dataclass
class Skeleton:
    version: str
    stage: Stage
    focus: list
    today_action: TodayAction
    # card id -> card; dict order is display order
    cards: dict
    obstacles: list = field(default_factory=list)
    motivation_hints: MotivationHints = field(default_factory=MotivationHints)
    rules_trace: list = field(default_factory=list)

    @property
    def weekly_plan_cards(self) -> list[SkeletonCard]:
        return list(self.cards.values())

    def to_payload(self) -> dict:
        return {
            "version": self.version,
            "stage": self.stage.value,
            "focus": list(self.focus),
            "today_action": asdict(self.today_action),
            "weekly_plan_cards": [asdict(c) for c in self.cards.values()],
            "obstacles": [asdict(o) for o in self.obstacles],
            "motivation_hints": asdict(self.motivation_hints),
            "rules_trace": list(self.rules_trace),
        }


@dataclass
class Fragment:
    """
    Partial skeleton merged over the base; every field is optional.
    prepend_cards puts cards that are new to the plan ahead of the existing ones.
    """
    today_action: Optional[TodayAction] = None
    cards: list = field(default_factory=list)
    obstacles: list = field(default_factory=list)
    motivation_hints: Optional[MotivationHints] = None
    rules_trace: list = field(default_factory=list)
    prepend_cards: bool = False

    @classmethod
    def from_dict(cls, raw: dict) -> "Fragment":
        hints = raw.get("motivation_hints")
        return cls(
            prepend_cards=bool(raw.get("prepend_cards", False)),
            today_action=TodayAction.from_dict(raw["today_action"]) if raw.get("today_action") else None,
            cards=[SkeletonCard.from_dict(c) for c in raw.get("weekly_plan_cards") or []],
            obstacles=[Obstacle(**o) for o in raw.get("obstacles") or []],
            motivation_hints=(
                MotivationHints(pros=list(hints.get("pros") or []), reframing=list(hints.get("reframing") or []))
                if hints else None
            ),
            rules_trace=list(raw.get("rules_trace") or []),
        )


def base_skeleton(stage: Stage) -> Skeleton:
    raw = copy.deepcopy(BASE_SKELETONS[Stage.parse(stage).value])
    cards = {}
    for c in raw.get("weekly_plan_cards") or []:
        card = SkeletonCard.from_dict(c)
        cards[card.id] = card
    hints = raw.get("motivation_hints") or {}
    return Skeleton(
        version=SKELETON_VERSION,
        stage=Stage.parse(stage),
        focus=list(raw.get("focus") or []),
        today_action=TodayAction.from_dict(raw["today_action"]),
        cards=cards,
        obstacles=[Obstacle(**o) for o in raw.get("obstacles") or []],
        motivation_hints=MotivationHints(pros=list(hints.get("pros") or []), reframing=list(hints.get("reframing") or [])),
        rules_trace=list(raw.get("rules_trace") or []),
    )


def _append_unique(target: list, items: list) -> None:
    for item in items:
        if item not in target:
            target.append(item)


def merge_fragment(skeleton: Skeleton, fragment: Fragment) -> Skeleton:
    """Apply one fragment in place and return the skeleton."""
    if fragment.today_action is not None:
        skeleton.today_action = copy.deepcopy(fragment.today_action)
    added = {}
    for card in fragment.cards:
        # replacing an existing key keeps its position
        if card.id in skeleton.cards:
            skeleton.cards[card.id] = copy.deepcopy(card)
        else:
            added[card.id] = copy.deepcopy(card)
    if fragment.prepend_cards:
        skeleton.cards = {**added, **skeleton.cards}
    else:
        skeleton.cards.update(added)
    _append_unique(skeleton.obstacles, copy.deepcopy(fragment.obstacles))
    if fragment.motivation_hints is not None:
        _append_unique(skeleton.motivation_hints.pros, fragment.motivation_hints.pros)
        _append_unique(skeleton.motivation_hints.reframing, fragment.motivation_hints.reframing)
    skeleton.rules_trace.extend(fragment.rules_trace)
    return skeleton


def trim_optional_cards(skeleton: Skeleton, limit: int = MAX_WEEKLY_CARDS) -> Skeleton:
    """Drop optional cards from the end until the plan fits or only required cards remain."""
    ids = list(skeleton.cards.keys())
    for card_id in reversed(ids):
        if len(skeleton.cards) <= limit:
            break
        if not skeleton.cards[card_id].required:
            del skeleton.cards[card_id]
    return skeleton


def pick_sma_focus(scores: Scores, bands: Bands, catalog: CatalogStore) -> Optional[SubDimension]:
    """
    Lowest-scoring SMA facet among those in their attention tier.
    SMA_DIMENSIONS order breaks exact ties; None when no facet needs attention.
    """
    focus: Optional[SubDimension] = None
    for dim in SMA_DIMENSIONS:
        if not catalog.is_attention(dim, bands[dim]):
            continue
        if focus is None or scores[dim] < scores[focus]:
            focus = dim
    return focus


@dataclass
class WorkSkeletonResult:
    skeleton: Skeleton
    scores: Scores
    bands: Bands
    band_labels: dict
    stage_name: str
    sma_focus: Optional[SubDimension] = None

    def to_payload(self) -> dict:
        return {
            "skeleton": self.skeleton.to_payload(),
            "scores": self.scores.to_payload(),
            "bands": self.bands.to_payload(),
            "band_labels": self.band_labels,
            "stage_name": self.stage_name,
            "sma_focus": self.sma_focus.key if self.sma_focus else None,
        }


def build_work_skeleton(scores: Scores, catalog: CatalogStore, bands: Optional[Bands] = None) -> WorkSkeletonResult:
    bands = bands or classify(scores, catalog)
    skeleton = base_skeleton(scores.stage)
    focus = pick_sma_focus(scores, bands, catalog)

    stress = SubDimension.RISCI_STRESS
    if catalog.is_attention(stress, bands[stress]) and focus is not None:
        merge_fragment(skeleton, Fragment.from_dict(FRAGMENT_STRESS_HIGH))

    efficacy = SubDimension.PSSM_SELF_EFFICACY
    if catalog.is_attention(efficacy, bands[efficacy]):
        merge_fragment(skeleton, Fragment.from_dict(FRAGMENT_SELF_EFFICACY_LOW))

    pros, cons = SubDimension.PDSM_PROS, SubDimension.PDSM_CONS
    if catalog.is_attention(cons, bands[cons]) or scores[cons] > scores[pros]:
        merge_fragment(skeleton, Fragment.from_dict(FRAGMENT_PROS_BOOST))

    if focus is not None:
        merge_fragment(skeleton, Fragment.from_dict(SMA_FOCUS_FRAGMENTS[focus.key]))

    trim_optional_cards(skeleton)
    debug_log(
        "work skeleton built",
        {
            "stage": scores.stage.value,
            "sma_focus": focus.key if focus else None,
            "cards": list(skeleton.cards.keys()),
        },
        tag="engine",
    )
    return WorkSkeletonResult(
        skeleton=skeleton,
        scores=scores,
        bands=bands,
        band_labels=band_labels(bands, catalog),
        stage_name=stage_name(scores.stage),
        sma_focus=focus,
    )


def build_from_answers(raw: RawAnswers, catalog: CatalogStore) -> WorkSkeletonResult:
    return build_work_skeleton(aggregate_scores(raw, catalog), catalog)


__all__ = [
    "MAX_WEEKLY_CARDS",
    "SkeletonCard",
    "Obstacle",
    "TodayAction",
    "MotivationHints",
    "Skeleton",
    "Fragment",
    "WorkSkeletonResult",
    "base_skeleton",
    "merge_fragment",
    "trim_optional_cards",
    "pick_sma_focus",
    "build_work_skeleton",
    "build_from_answers",
]
