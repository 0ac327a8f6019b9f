"""
Band classification: facet totals → catalog band ids (+ prescription keys).
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from .catalog import BandRange, CatalogStore
from .dimensions import PRESCRIBED_DIMENSIONS, QUESTIONNAIRES, Stage, SubDimension
from .errors import BandNotFound
from .scoring import Scores

STAGE_NAMES = {
    Stage.PC: "Precontemplation",
    Stage.C: "Contemplation",
    Stage.PR: "Preparation",
    Stage.A: "Action",
    Stage.M: "Maintenance",
}


def stage_name(stage: Stage) -> str:
    return STAGE_NAMES[Stage.parse(stage)]


def band_of(ranges: Iterable[BandRange], value: int, dimension: str = "score") -> str:
    """First range (authoring order) whose inclusive [low, high] holds value."""
    for r in ranges:
        if r.contains(value):
            return r.id
    raise BandNotFound(dimension, value)


@dataclass(frozen=True)
class Bands:
    stage: Stage
    bands: Mapping[SubDimension, str]
    prescriptions: Mapping[SubDimension, str]

    def __getitem__(self, dim: SubDimension) -> str:
        return self.bands[dim]

    def prescription(self, dim: SubDimension) -> str:
        return self.prescriptions[dim]

    def to_payload(self) -> dict:
        """Nested {"stage", "RISCI": {...}, "RISCI_presc": {...}, "SMA": {...}, ...}."""
        out: dict = {"stage": self.stage.value}
        for ns in QUESTIONNAIRES:
            out[ns] = {}
        for dim in SubDimension:
            out[dim.questionnaire][dim.key] = self.bands[dim]
        out["RISCI_presc"] = {dim.key: self.prescriptions[dim] for dim in PRESCRIBED_DIMENSIONS}
        return out


def classify(scores: Scores, catalog: CatalogStore) -> Bands:
    bands = {}
    for dim in SubDimension:
        banding = catalog.banding(dim)
        bands[dim] = band_of(banding.ranges, scores[dim], dimension=dim.path)

    prescriptions = {}
    for dim in PRESCRIBED_DIMENSIONS:
        key = catalog.banding(dim).prescriptions.get(bands[dim])
        if key is None:
            raise BandNotFound(dim.path, bands[dim], f"no prescription key for band {bands[dim]}")
        prescriptions[dim] = key

    return Bands(
        stage=scores.stage,
        bands=MappingProxyType(bands),
        prescriptions=MappingProxyType(prescriptions),
    )


def band_labels(bands: Bands, catalog: CatalogStore) -> dict:
    """Same nesting as Bands.to_payload() with human-readable labels in place of ids."""
    out: dict = {"stage": stage_name(bands.stage)}
    for ns in QUESTIONNAIRES:
        out[ns] = {}
    for dim in SubDimension:
        out[dim.questionnaire][dim.key] = catalog.band_label(dim, bands[dim])
    return out


__all__ = ["Bands", "band_of", "classify", "band_labels", "stage_name", "STAGE_NAMES"]
