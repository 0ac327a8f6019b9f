import copy
import json
import os
import tempfile
from types import SimpleNamespace

# Point the ORM at a throwaway SQLite file before ttm_coach.db is imported.
_DB_DIR = tempfile.mkdtemp(prefix="ttm_coach_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.pop("OPENAI_API_KEY", None)

import pytest

from ttm_coach.catalog import DEFAULT_CATALOG_PATH, CatalogStore, load_catalog
from ttm_coach.scoring import Scores


# Totals that land every facet in its MID band of the bundled catalog.
MID_TOTALS = {
    "risci": {"stress": 9, "coping": 9},
    "sma": {"planning": 6, "reframing": 6, "healthy_activity": 6},
    "pssm": {"self_efficacy": 15},
    "pdsm": {"pros": 9, "cons": 9},
    "ppsm": {"experiential": 15, "behavioral": 15},
}

# Answers matching the bundled catalog's item counts, all neutral (3).
NEUTRAL_ANSWERS = {
    "risci": {"stress": [3, 3, 3], "coping": [3, 3, 3]},
    "sma": {"planning": [3, 3], "reframing": [3, 3], "healthy": [3, 3]},
    "pssm": [3, 3, 3, 3, 3],
    "pdsm": {"pros": [3, 3, 3], "cons": [3, 3, 3]},
    "ppsm": {"experiential": [3, 3, 3, 3, 3], "behavioral": [3, 3, 3, 3, 3]},
}


def _merge(base: dict, overrides: dict) -> dict:
    out = copy.deepcopy(base)
    for section, values in overrides.items():
        if isinstance(values, dict) and isinstance(out.get(section), dict):
            out[section].update(values)
        else:
            out[section] = values
    return out


@pytest.fixture(scope="session")
def catalog_data():
    with open(DEFAULT_CATALOG_PATH, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
def make_catalog(catalog_data):
    """Build a CatalogStore from a deep copy of the bundled data after `mutate(data)`."""
    def _make(mutate=None):
        data = copy.deepcopy(catalog_data)
        if mutate is not None:
            mutate(data)
        return CatalogStore(data, source="<test>")
    return _make


@pytest.fixture
def scores_payload():
    def _make(stage="PR", **sections):
        return {"stage": stage, **_merge(MID_TOTALS, sections)}
    return _make


@pytest.fixture
def make_scores(scores_payload):
    def _make(stage="PR", **sections):
        return Scores.from_payload(scores_payload(stage, **sections))
    return _make


@pytest.fixture
def answers_payload():
    def _make(stage="PR", **sections):
        return {"stage": stage, **_merge(NEUTRAL_ANSWERS, sections)}
    return _make


class FakeLLM:
    """Stands in for ChatOpenAI: records prompts, replies with queued text."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def invoke(self, prompt):
        self.calls.append(prompt)
        if not self.replies:
            return SimpleNamespace(content="")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(content=reply)


@pytest.fixture
def fake_llm():
    return FakeLLM()
