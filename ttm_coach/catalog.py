"""
Catalog store: the static, versioned dataset of band range tables and
feedback message templates.

The catalog is parsed once into immutable records and handed to every engine
function explicitly. Nothing in the engine mutates it.

JSON layout:
  {
    "version": "...",
    "bands": {"RISCI": {"stress": {"items": 3,
                                   "banding": [{"id", "label", "range": [lo, hi], "attention"?}],
                                   "prescription_collapsed"?: {band_id: key}}}},
    "messages": {"<GROUP>": [{"id", "stage"?, "bands"?, "template": {"title", "body"},
                              "suggested_actions"?}]}
  }
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .debug_utils import debug_log
from .dimensions import PRESCRIBED_DIMENSIONS, SMA_DIMENSIONS, Stage, SubDimension
from .errors import CatalogLoadError, MessageNotFound

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"

LIKERT_MIN = 1
LIKERT_MAX = 5


class MessageGroup(str, Enum):
    HEADER = "HEADER"
    DB_MATRIX = "DB.MATRIX"
    SE_GEN = "SE.GEN"
    SE_BANDED = "SE.BANDED"
    PROC_EXP = "PROC.EXP"
    PROC_EXP_BEH = "PROC.EXP_BEH"
    PROC_BEH = "PROC.BEH"
    RISCI_STRESS_PRESC = "RISCI.STRESS.PRESC"
    RISCI_COPING_PRESC = "RISCI.COPING.PRESC"
    SMA_PLANNING = "SMA.PLANNING"
    SMA_REFRAMING = "SMA.REFRAMING"
    SMA_HEALTHY = "SMA.HEALTHY"
    FOOTER = "FOOTER"


HEADER_STAGE_ID = "HEADER.STAGE"
SE_GENERIC_ID = "SE.GEN.PC_C"
FOOTER_ID = "FOOTER.NEXT_STEP"

PRESCRIPTION_GROUPS = {
    SubDimension.RISCI_STRESS: MessageGroup.RISCI_STRESS_PRESC,
    SubDimension.RISCI_COPING: MessageGroup.RISCI_COPING_PRESC,
}

SMA_MESSAGE_GROUPS = {
    SubDimension.SMA_PLANNING: MessageGroup.SMA_PLANNING,
    SubDimension.SMA_REFRAMING: MessageGroup.SMA_REFRAMING,
    SubDimension.SMA_HEALTHY_ACTIVITY: MessageGroup.SMA_HEALTHY,
}


def split_message_id(message_id: str) -> tuple[str, str]:
    """Split "NS:KEY" or "NS.KEY" into (namespace, key); the key follows the last dot."""
    raw = (message_id or "").strip()
    if ":" in raw:
        ns, _, key = raw.partition(":")
    else:
        ns, _, key = raw.rpartition(".")
    return ns, key


def canonical_message_id(message_id: str) -> str:
    ns, key = split_message_id(message_id)
    return f"{ns}.{key}" if ns else key


# ──────────────────────────────────────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BandRange:
    id: str
    label: str
    low: int
    high: int
    attention: bool = False

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class DimensionBanding:
    dimension: SubDimension
    items: int
    ranges: tuple[BandRange, ...]
    prescriptions: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def min_score(self) -> int:
        return self.items * LIKERT_MIN

    @property
    def max_score(self) -> int:
        return self.items * LIKERT_MAX

    def range_for(self, band_id: str) -> Optional[BandRange]:
        return next((r for r in self.ranges if r.id == band_id), None)


@dataclass(frozen=True)
class MessageRecord:
    id: str
    title: str = ""
    body: str = ""
    stages: Optional[frozenset] = None
    bands: Optional[Mapping[str, str]] = None
    suggested_actions: tuple[str, ...] = ()

    def applies_to(self, stage: Stage) -> bool:
        return self.stages is None or stage in self.stages


def _parse_range(dim: SubDimension, raw: dict) -> BandRange:
    try:
        lo, hi = raw["range"]
        return BandRange(
            id=str(raw["id"]),
            label=str(raw.get("label") or raw["id"]),
            low=int(lo),
            high=int(hi),
            attention=bool(raw.get("attention", False)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogLoadError(f"{dim.path}: malformed band entry {raw!r}") from e


def _parse_banding(dim: SubDimension, raw: Optional[dict]) -> DimensionBanding:
    if not isinstance(raw, dict):
        raise CatalogLoadError(f"bands.{dim.path} missing from catalog")
    entries = raw.get("banding")
    if not isinstance(entries, list) or not entries:
        raise CatalogLoadError(f"bands.{dim.path}.banding must be a non-empty list")
    try:
        items = int(raw.get("items"))
    except (TypeError, ValueError) as e:
        raise CatalogLoadError(f"bands.{dim.path}.items must be an integer") from e
    if items <= 0:
        raise CatalogLoadError(f"bands.{dim.path}.items must be positive")
    presc = raw.get("prescription_collapsed") or {}
    if not isinstance(presc, dict):
        raise CatalogLoadError(f"bands.{dim.path}.prescription_collapsed must be an object")
    return DimensionBanding(
        dimension=dim,
        items=items,
        ranges=tuple(_parse_range(dim, e) for e in entries),
        prescriptions=MappingProxyType({str(k): str(v) for k, v in presc.items()}),
    )


def _parse_stages(raw) -> Optional[frozenset]:
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = [raw]
    return frozenset(Stage.parse(s) for s in raw)


def _parse_message(group: str, raw: dict) -> MessageRecord:
    if not isinstance(raw, dict) or not raw.get("id"):
        raise CatalogLoadError(f"messages.{group}: every record needs an id")
    tmpl = raw.get("template") or {}
    bands = raw.get("bands")
    try:
        stages = _parse_stages(raw.get("stage"))
    except ValueError as e:
        raise CatalogLoadError(f"messages.{group}.{raw['id']}: {e}") from e
    return MessageRecord(
        id=str(raw["id"]),
        title=str(tmpl.get("title") or ""),
        body=str(tmpl.get("body") or ""),
        stages=stages,
        bands=MappingProxyType({str(k): str(v) for k, v in bands.items()}) if isinstance(bands, dict) else None,
        suggested_actions=tuple(str(a) for a in (raw.get("suggested_actions") or [])),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Store
# ──────────────────────────────────────────────────────────────────────────────

class CatalogStore:
    """Read-only view over one catalog version."""

    def __init__(self, data: dict, source: str = "<memory>"):
        if not isinstance(data, dict):
            raise CatalogLoadError("catalog root must be an object")
        self.source = source
        self.version = str(data.get("version") or "unversioned")
        bands = data.get("bands") or {}
        self._banding = MappingProxyType({
            dim: _parse_banding(dim, (bands.get(dim.questionnaire) or {}).get(dim.key))
            for dim in SubDimension
        })
        messages = data.get("messages") or {}
        if not isinstance(messages, dict):
            raise CatalogLoadError("catalog.messages must be an object")
        groups = {}
        for name, records in messages.items():
            if not isinstance(records, list):
                raise CatalogLoadError(f"messages.{name} must be a list")
            groups[str(name)] = tuple(_parse_message(name, r) for r in records)
        self._groups = MappingProxyType(groups)

    def __repr__(self) -> str:
        return f"CatalogStore(version={self.version!r}, source={self.source!r})"

    # Bands ------------------------------------------------------------------
    def banding(self, dim: SubDimension) -> DimensionBanding:
        return self._banding[dim]

    def item_count(self, dim: SubDimension) -> int:
        return self._banding[dim].items

    def band_label(self, dim: SubDimension, band_id: str) -> str:
        rng = self._banding[dim].range_for(band_id)
        return rng.label if rng else band_id

    def is_attention(self, dim: SubDimension, band_id: str) -> bool:
        rng = self._banding[dim].range_for(band_id)
        return bool(rng and rng.attention)

    # Messages ---------------------------------------------------------------
    @property
    def group_names(self) -> tuple[str, ...]:
        return tuple(self._groups.keys())

    def has_group(self, name: str | MessageGroup) -> bool:
        return _group_key(name) in self._groups

    def messages(self, name: str | MessageGroup) -> tuple[MessageRecord, ...]:
        """Records of one group in authoring order (empty when the group is absent)."""
        return self._groups.get(_group_key(name), ())

    def iter_messages(self) -> Iterable[tuple[str, MessageRecord]]:
        for name, records in self._groups.items():
            for rec in records:
                yield name, rec

    def find_message(self, message_id: str) -> MessageRecord:
        """
        Resolve "NS:KEY" / "NS.KEY" through its namespace group first.
        Ids whose group is missing (legacy or mismatched catalogs) go through
        a degraded scan of every group. Raises MessageNotFound when absent.
        """
        wanted = canonical_message_id(message_id)
        ns, _ = split_message_id(message_id)
        for rec in self._groups.get(ns, ()):
            if canonical_message_id(rec.id) == wanted:
                return rec
        # degraded path: scan all groups
        for name, rec in self.iter_messages():
            if canonical_message_id(rec.id) == wanted:
                debug_log(
                    "message resolved outside its namespace",
                    {"id": message_id, "namespace": ns, "found_in": name},
                    tag="catalog",
                )
                return rec
        raise MessageNotFound(message_id, f"message not found: {message_id} (catalog {self.version})")


def _group_key(name: str | MessageGroup) -> str:
    return name.value if isinstance(name, MessageGroup) else str(name)


# ──────────────────────────────────────────────────────────────────────────────
# Loading
# ──────────────────────────────────────────────────────────────────────────────

def load_catalog(path: str | Path | None = None) -> CatalogStore:
    p = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CatalogLoadError(f"catalog not found: {p}") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"catalog is not valid JSON: {p}: {e}") from e
    store = CatalogStore(data, source=str(p))
    debug_log("catalog loaded", {"path": str(p), "version": store.version}, tag="catalog")
    return store


@lru_cache(maxsize=1)
def default_catalog() -> CatalogStore:
    """Process-wide catalog for the HTTP layer (CATALOG_PATH or the bundled file)."""
    from .config import settings

    return load_catalog(settings.CATALOG_PATH or None)


# ──────────────────────────────────────────────────────────────────────────────
# Authoring checks
# ──────────────────────────────────────────────────────────────────────────────

def _tiling_problems(banding: DimensionBanding) -> list[str]:
    problems: list[str] = []
    path = banding.dimension.path
    ordered = sorted(banding.ranges, key=lambda r: (r.low, r.high))
    for r in ordered:
        if r.low > r.high:
            problems.append(f"{path}: band {r.id} has low > high ({r.low} > {r.high})")
    expected = banding.min_score
    for r in ordered:
        if r.low > expected:
            problems.append(f"{path}: scores {expected}..{r.low - 1} not covered")
        elif r.low < expected:
            problems.append(f"{path}: band {r.id} overlaps at {r.low}..{min(r.high, expected - 1)}")
        expected = max(expected, r.high + 1)
    if expected <= banding.max_score:
        problems.append(f"{path}: scores {expected}..{banding.max_score} not covered")
    elif ordered and ordered[-1].high > banding.max_score:
        problems.append(f"{path}: band {ordered[-1].id} exceeds max score {banding.max_score}")
    ids = [r.id for r in banding.ranges]
    if len(set(ids)) != len(ids):
        problems.append(f"{path}: duplicate band ids {ids}")
    return problems


def _has_id(catalog: CatalogStore, message_id: str) -> bool:
    try:
        catalog.find_message(message_id)
        return True
    except MessageNotFound:
        return False


def validate_catalog(catalog: CatalogStore) -> list[str]:
    """Return human-readable authoring defects (empty list when the catalog is sound)."""
    problems: list[str] = []
    for dim in SubDimension:
        problems.extend(_tiling_problems(catalog.banding(dim)))

    for dim in PRESCRIBED_DIMENSIONS:
        banding = catalog.banding(dim)
        group = PRESCRIPTION_GROUPS[dim]
        for r in banding.ranges:
            key = banding.prescriptions.get(r.id)
            if key is None:
                problems.append(f"{dim.path}: no prescription key for band {r.id}")
            elif not _has_id(catalog, f"{group.value}.{key}"):
                problems.append(f"{dim.path}: message {group.value}.{key} missing")

    for dim in SMA_DIMENSIONS:
        group = SMA_MESSAGE_GROUPS[dim]
        for r in catalog.banding(dim).ranges:
            if not _has_id(catalog, f"{group.value}.{r.id}"):
                problems.append(f"{dim.path}: message {group.value}.{r.id} missing")

    for fixed in (HEADER_STAGE_ID, SE_GENERIC_ID, FOOTER_ID):
        if not _has_id(catalog, fixed):
            problems.append(f"message {fixed} missing")

    stage_groups = {
        MessageGroup.DB_MATRIX: tuple(Stage),
        MessageGroup.SE_BANDED: (Stage.PR, Stage.A, Stage.M),
        MessageGroup.PROC_EXP: (Stage.PC, Stage.C),
        MessageGroup.PROC_EXP_BEH: (Stage.PR,),
        MessageGroup.PROC_BEH: (Stage.A, Stage.M),
    }
    for group, stages in stage_groups.items():
        records = catalog.messages(group)
        for stage in stages:
            if not any(r.applies_to(stage) for r in records):
                problems.append(f"group {group.value} has no message for stage {stage.value}")
    return problems


__all__ = [
    "MessageGroup",
    "BandRange",
    "DimensionBanding",
    "MessageRecord",
    "CatalogStore",
    "load_catalog",
    "default_catalog",
    "validate_catalog",
    "split_message_id",
    "canonical_message_id",
    "HEADER_STAGE_ID",
    "SE_GENERIC_ID",
    "FOOTER_ID",
    "PRESCRIPTION_GROUPS",
    "SMA_MESSAGE_GROUPS",
]
