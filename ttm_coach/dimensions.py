"""
Closed enumerations shared by the scoring engine: TTM stages and the ten
scored questionnaire facets (sub-dimensions).
"""
from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    PC = "PC"  # precontemplation
    C = "C"    # contemplation
    PR = "PR"  # preparation
    A = "A"    # action
    M = "M"    # maintenance

    @classmethod
    def parse(cls, value) -> "Stage":
        if isinstance(value, Stage):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            raise ValueError(f"unknown stage: {value!r}") from None


EARLY_STAGES = frozenset({Stage.PC, Stage.C})
ACTIVE_STAGES = frozenset({Stage.A, Stage.M})


class SubDimension(Enum):
    """(questionnaire namespace, facet key) for every scored facet."""

    RISCI_STRESS = ("RISCI", "stress")
    RISCI_COPING = ("RISCI", "coping")
    SMA_PLANNING = ("SMA", "planning")
    SMA_REFRAMING = ("SMA", "reframing")
    SMA_HEALTHY_ACTIVITY = ("SMA", "healthy_activity")
    PSSM_SELF_EFFICACY = ("PSSM", "self_efficacy")
    PDSM_PROS = ("PDSM", "pros")
    PDSM_CONS = ("PDSM", "cons")
    PPSM_EXPERIENTIAL = ("PPSM", "experiential")
    PPSM_BEHAVIORAL = ("PPSM", "behavioral")

    @property
    def questionnaire(self) -> str:
        return self.value[0]

    @property
    def key(self) -> str:
        return self.value[1]

    @property
    def path(self) -> str:
        return f"{self.questionnaire}.{self.key}"

    @classmethod
    def by_path(cls, path: str) -> "SubDimension":
        for dim in cls:
            if dim.path == path:
                return dim
        raise KeyError(path)


QUESTIONNAIRES = ("RISCI", "SMA", "PSSM", "PDSM", "PPSM")

SMA_DIMENSIONS = (
    SubDimension.SMA_PLANNING,
    SubDimension.SMA_REFRAMING,
    SubDimension.SMA_HEALTHY_ACTIVITY,
)

# Facets whose band feeds a prescription-key indirection
PRESCRIBED_DIMENSIONS = (SubDimension.RISCI_STRESS, SubDimension.RISCI_COPING)


def dimensions_of(questionnaire: str) -> list[SubDimension]:
    return [d for d in SubDimension if d.questionnaire == questionnaire]


__all__ = [
    "Stage",
    "SubDimension",
    "EARLY_STAGES",
    "ACTIVE_STAGES",
    "QUESTIONNAIRES",
    "SMA_DIMENSIONS",
    "PRESCRIBED_DIMENSIONS",
    "dimensions_of",
]
