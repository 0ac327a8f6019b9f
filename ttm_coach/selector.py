"""
Feedback message selection: one rendered catalog message per fixed topic slot.

Slot order is part of the output contract:
  header → decision_balance → self_efficacy → process → stress → coping →
  sma_planning → sma_reframing → sma_healthy_activity → footer
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from .banding import Bands, classify, stage_name
from .catalog import (
    FOOTER_ID,
    HEADER_STAGE_ID,
    PRESCRIPTION_GROUPS,
    SE_GENERIC_ID,
    SMA_MESSAGE_GROUPS,
    CatalogStore,
    MessageGroup,
    MessageRecord,
)
from .debug_utils import debug_log
from .dimensions import EARLY_STAGES, SMA_DIMENSIONS, Stage, SubDimension
from .errors import MessageNotFound
from .scoring import Scores
from .templates import RenderedMessage, render_message

SLOTS = (
    "header",
    "decision_balance",
    "self_efficacy",
    "process",
    "stress",
    "coping",
    "sma_planning",
    "sma_reframing",
    "sma_healthy_activity",
    "footer",
)


class SelfEfficacyPolicy(str, Enum):
    # PC/C get the generic message, PR/A/M the banded one
    STAGE_CONDITIONAL = "stage_conditional"
    # banded lookup for every stage
    ALWAYS_BANDED = "always_banded"

    @classmethod
    def parse(cls, value) -> "SelfEfficacyPolicy":
        if isinstance(value, SelfEfficacyPolicy):
            return value
        return cls(str(value or cls.STAGE_CONDITIONAL.value).strip().lower())


@dataclass(frozen=True)
class Selection:
    items: list
    bands: Bands

    def to_payload(self) -> dict:
        return {
            "items": [m.to_payload() for m in self.items],
            "bands": self.bands.to_payload(),
        }


def filter_by_stage(records: Sequence[MessageRecord], stage: Stage) -> list[MessageRecord]:
    return [r for r in records if r.applies_to(stage)]


def find_by_bands(records: Sequence[MessageRecord], probe: Mapping[str, str]) -> MessageRecord:
    """
    Exact match on every probe key wins; otherwise the first record without
    band requirements; otherwise the first record. Catalog order breaks ties.
    """
    if not records:
        raise MessageNotFound(",".join(f"{k}={v}" for k, v in probe.items()), "no candidate messages")
    for r in records:
        if r.bands is not None and all(r.bands.get(k) == v for k, v in probe.items()):
            return r
    for r in records:
        if r.bands is None:
            return r
    return records[0]


def pick_by_id(catalog: CatalogStore, message_id: str) -> MessageRecord:
    return catalog.find_message(message_id)


def _pick_banded(catalog: CatalogStore, group: MessageGroup, stage: Stage, probe: Mapping[str, str]) -> MessageRecord:
    candidates = filter_by_stage(catalog.messages(group), stage)
    if not candidates:
        raise MessageNotFound(group.value, f"group {group.value} has no message for stage {stage.value}")
    return find_by_bands(candidates, probe)


def _self_efficacy(catalog: CatalogStore, bands: Bands, policy: SelfEfficacyPolicy) -> MessageRecord:
    if policy is SelfEfficacyPolicy.STAGE_CONDITIONAL and bands.stage in EARLY_STAGES:
        return pick_by_id(catalog, SE_GENERIC_ID)
    return _pick_banded(
        catalog,
        MessageGroup.SE_BANDED,
        bands.stage,
        {"self_efficacy": bands[SubDimension.PSSM_SELF_EFFICACY]},
    )


def _process(catalog: CatalogStore, bands: Bands) -> MessageRecord:
    exp = bands[SubDimension.PPSM_EXPERIENTIAL]
    beh = bands[SubDimension.PPSM_BEHAVIORAL]
    if bands.stage in EARLY_STAGES:
        return _pick_banded(catalog, MessageGroup.PROC_EXP, bands.stage, {"experiential": exp})
    if bands.stage is Stage.PR:
        return _pick_banded(
            catalog, MessageGroup.PROC_EXP_BEH, bands.stage, {"experiential": exp, "behavioral": beh}
        )
    return _pick_banded(catalog, MessageGroup.PROC_BEH, bands.stage, {"behavioral": beh})


def select_messages(
    scores: Scores,
    catalog: CatalogStore,
    policy: SelfEfficacyPolicy | str = SelfEfficacyPolicy.STAGE_CONDITIONAL,
    bands: Optional[Bands] = None,
) -> Selection:
    """Pick and render the feedback sequence for one submission."""
    policy = SelfEfficacyPolicy.parse(policy)
    bands = bands or classify(scores, catalog)
    variables = {"stage_label": stage_name(scores.stage), "stage": scores.stage.value}

    picks: list[tuple[str, MessageRecord]] = [
        ("header", pick_by_id(catalog, HEADER_STAGE_ID)),
        ("decision_balance", _pick_banded(
            catalog,
            MessageGroup.DB_MATRIX,
            scores.stage,
            {"pros": bands[SubDimension.PDSM_PROS], "cons": bands[SubDimension.PDSM_CONS]},
        )),
        ("self_efficacy", _self_efficacy(catalog, bands, policy)),
        ("process", _process(catalog, bands)),
    ]
    for slot, dim in (("stress", SubDimension.RISCI_STRESS), ("coping", SubDimension.RISCI_COPING)):
        group = PRESCRIPTION_GROUPS[dim]
        picks.append((slot, pick_by_id(catalog, f"{group.value}.{bands.prescription(dim)}")))
    for dim in SMA_DIMENSIONS:
        group = SMA_MESSAGE_GROUPS[dim]
        picks.append((f"sma_{dim.key}", pick_by_id(catalog, f"{group.value}.{bands[dim]}")))
    picks.append(("footer", pick_by_id(catalog, FOOTER_ID)))

    items: list[RenderedMessage] = [render_message(rec, variables, slot=slot) for slot, rec in picks]
    debug_log(
        "messages selected",
        {"stage": scores.stage.value, "policy": policy.value, "ids": [m.id for m in items]},
        tag="engine",
    )
    return Selection(items=items, bands=bands)


__all__ = [
    "SLOTS",
    "SelfEfficacyPolicy",
    "Selection",
    "filter_by_stage",
    "find_by_bands",
    "pick_by_id",
    "select_messages",
]
