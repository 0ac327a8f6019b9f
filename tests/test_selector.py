import itertools
import json

import pytest

from ttm_coach.catalog import MessageRecord
from ttm_coach.dimensions import Stage
from ttm_coach.errors import MessageNotFound
from ttm_coach.scoring import RawAnswers, aggregate_scores
from ttm_coach.selector import (
    SLOTS,
    SelfEfficacyPolicy,
    filter_by_stage,
    find_by_bands,
    pick_by_id,
    select_messages,
)

# one total per band for 3-item, 5-item facets
REP3 = {"LOW": 5, "MID": 9, "HIGH": 13}
REP5 = {"LOW": 8, "MID": 15, "HIGH": 22}


def _ids(selection):
    return {m.slot: m.id for m in selection.items}


def test_slots_in_fixed_order(catalog, make_scores):
    selection = select_messages(make_scores("PR"), catalog)
    assert tuple(m.slot for m in selection.items) == SLOTS
    assert selection.items[0].id == "HEADER.STAGE"
    assert selection.items[-1].id == "FOOTER.NEXT_STEP"


def test_every_stage_and_band_combination_fills_all_slots(catalog, make_scores):
    for stage, pros, cons, se, exp, beh in itertools.product(
        Stage, REP3, REP3, REP5, REP5, REP5
    ):
        scores = make_scores(
            stage.value,
            pdsm={"pros": REP3[pros], "cons": REP3[cons]},
            pssm={"self_efficacy": REP5[se]},
            ppsm={"experiential": REP5[exp], "behavioral": REP5[beh]},
        )
        for policy in SelfEfficacyPolicy:
            items = select_messages(scores, catalog, policy=policy).items
            assert [m.slot for m in items] == list(SLOTS)
            assert all(m.id and m.body for m in items)


@pytest.mark.parametrize("stress,coping,sma", [
    (s, c, m) for s in ("LOW", "MID", "HIGH") for c in ("LOW", "MID", "HIGH") for m in ("LOW", "MID", "HIGH")
])
def test_risci_and_sma_bands_resolve(catalog, make_scores, stress, coping, sma):
    stress_total = {"LOW": 5, "MID": 9, "HIGH": 12}[stress]
    coping_total = {"LOW": 5, "MID": 9, "HIGH": 13}[coping]
    sma_total = {"LOW": 4, "MID": 6, "HIGH": 9}[sma]
    ids = _ids(select_messages(
        make_scores(
            "A",
            risci={"stress": stress_total, "coping": coping_total},
            sma={"planning": sma_total, "reframing": sma_total, "healthy_activity": sma_total},
        ),
        catalog,
    ))
    assert ids["stress"] == f"RISCI.STRESS.PRESC.{'ATTN' if stress == 'HIGH' else 'OK'}"
    assert ids["coping"] == f"RISCI.COPING.PRESC.{'ATTN' if coping == 'LOW' else 'OK'}"
    assert ids["sma_planning"] == f"SMA.PLANNING.{sma}"
    assert ids["sma_reframing"] == f"SMA.REFRAMING.{sma}"
    assert ids["sma_healthy_activity"] == f"SMA.HEALTHY.{sma}"


def test_max_stress_answers_pick_attention_prescription(catalog, answers_payload):
    raw = RawAnswers.from_payload(answers_payload(risci={"stress": [5, 5, 5]}))
    scores = aggregate_scores(raw, catalog)
    assert _ids(select_messages(scores, catalog))["stress"] == "RISCI.STRESS.PRESC.ATTN"


def test_missing_prescription_message_raises(make_catalog, make_scores):
    def drop_attn(data):
        data["messages"]["RISCI.STRESS.PRESC"] = [
            m for m in data["messages"]["RISCI.STRESS.PRESC"] if m["id"] != "RISCI.STRESS.PRESC.ATTN"
        ]

    with pytest.raises(MessageNotFound):
        select_messages(make_scores(risci={"stress": 15}), make_catalog(drop_attn))


def test_self_efficacy_policy_for_precontemplation(catalog, make_scores):
    scores = make_scores("PC")
    assert _ids(select_messages(scores, catalog))["self_efficacy"] == "SE.GEN.PC_C"
    banded = select_messages(scores, catalog, policy=SelfEfficacyPolicy.ALWAYS_BANDED)
    assert _ids(banded)["self_efficacy"] == "SE.BANDED.MID"
    assert _ids(select_messages(scores, catalog, policy="always_banded"))["self_efficacy"] == "SE.BANDED.MID"


def test_self_efficacy_banded_from_preparation(catalog, make_scores):
    ids = _ids(select_messages(make_scores("PR", pssm={"self_efficacy": 8}), catalog))
    assert ids["self_efficacy"] == "SE.BANDED.LOW"


def test_missing_generic_self_efficacy_message(make_catalog, make_scores):
    def drop(data):
        data["messages"]["SE.GEN"] = []

    store = make_catalog(drop)
    with pytest.raises(MessageNotFound):
        select_messages(make_scores("C"), store)
    # later stages never look it up
    select_messages(make_scores("A"), store)


def test_decision_balance_stage_specific_record_first(catalog, make_scores):
    scores_pc = make_scores("PC", pdsm={"pros": 5, "cons": 13})
    scores_pr = make_scores("PR", pdsm={"pros": 5, "cons": 13})
    assert _ids(select_messages(scores_pc, catalog))["decision_balance"] == "DB.PC_C.PROS_LOW_CONS_HIGH"
    assert _ids(select_messages(scores_pr, catalog))["decision_balance"] == "DB.PROS_LOW_CONS_HIGH"


def test_decision_balance_falls_back_to_general(catalog, make_scores):
    ids = _ids(select_messages(make_scores("A", pdsm={"pros": 5, "cons": 5}), catalog))
    assert ids["decision_balance"] == "DB.GENERAL"


@pytest.mark.parametrize("stage,exp,beh,expected", [
    ("PC", 8, 22, "PROC.EXP.LOW"),
    ("C", 22, 8, "PROC.EXP.HIGH"),
    ("PR", 22, 8, "PROC.EXP_BEH.HIGH_LOW"),
    ("PR", 8, 8, "PROC.EXP_BEH.LOW_LOW"),
    ("PR", 15, 15, "PROC.EXP_BEH.GENERAL"),
    ("A", 8, 22, "PROC.BEH.HIGH"),
    ("M", 22, 15, "PROC.BEH.MID"),
])
def test_process_slot_by_stage(catalog, make_scores, stage, exp, beh, expected):
    scores = make_scores(stage, ppsm={"experiential": exp, "behavioral": beh})
    assert _ids(select_messages(scores, catalog))["process"] == expected


def test_stage_group_without_candidates_raises(make_catalog, make_scores):
    def drop(data):
        data["messages"]["PROC.BEH"] = []

    with pytest.raises(MessageNotFound):
        select_messages(make_scores("M"), make_catalog(drop))


def test_header_is_interpolated(catalog, make_scores):
    header = select_messages(make_scores("M"), catalog).items[0]
    assert "Maintenance" in header.title
    assert "{{" not in header.body


def test_selection_is_idempotent(catalog, make_scores, make_catalog):
    scores = make_scores("C", risci={"stress": 13}, pdsm={"pros": 5, "cons": 14})
    first = json.dumps(select_messages(scores, catalog).to_payload(), sort_keys=True)
    second = json.dumps(select_messages(scores, catalog).to_payload(), sort_keys=True)
    third = json.dumps(select_messages(scores, make_catalog()).to_payload(), sort_keys=True)
    assert first == second == third


def _rec(rid, bands=None, stages=None):
    return MessageRecord(id=rid, bands=bands, stages=frozenset(stages) if stages else None)


def test_find_by_bands_prefers_exact_match_over_fallback():
    general = _rec("X.GENERAL")
    exact = _rec("X.EXACT", {"pros": "LOW", "cons": "HIGH"})
    assert find_by_bands([general, exact], {"pros": "LOW", "cons": "HIGH"}).id == "X.EXACT"
    assert find_by_bands([exact, general], {"pros": "LOW", "cons": "HIGH"}).id == "X.EXACT"


def test_find_by_bands_fallback_order():
    a = _rec("X.A", {"pros": "HIGH"})
    b = _rec("X.B", {"pros": "MID"})
    general = _rec("X.GENERAL")
    assert find_by_bands([a, general, b], {"pros": "LOW"}).id == "X.GENERAL"
    assert find_by_bands([a, b], {"pros": "LOW"}).id == "X.A"


def test_find_by_bands_partial_match_is_not_exact():
    partial = _rec("X.PARTIAL", {"pros": "LOW", "cons": "LOW"})
    general = _rec("X.GENERAL")
    assert find_by_bands([partial, general], {"pros": "LOW", "cons": "HIGH"}).id == "X.GENERAL"


def test_find_by_bands_empty_raises():
    with pytest.raises(MessageNotFound):
        find_by_bands([], {"pros": "LOW"})


def test_filter_by_stage():
    recs = [_rec("X.ALL"), _rec("X.EARLY", stages=[Stage.PC, Stage.C])]
    assert [r.id for r in filter_by_stage(recs, Stage.A)] == ["X.ALL"]
    assert [r.id for r in filter_by_stage(recs, Stage.C)] == ["X.ALL", "X.EARLY"]


def test_pick_by_id(catalog):
    assert pick_by_id(catalog, "SMA.REFRAMING.HIGH").id == "SMA.REFRAMING.HIGH"
    with pytest.raises(MessageNotFound):
        pick_by_id(catalog, "SMA.REFRAMING.EXTREME")


def test_policy_parse():
    assert SelfEfficacyPolicy.parse(None) is SelfEfficacyPolicy.STAGE_CONDITIONAL
    assert SelfEfficacyPolicy.parse("ALWAYS_BANDED") is SelfEfficacyPolicy.ALWAYS_BANDED
    with pytest.raises(ValueError):
        SelfEfficacyPolicy.parse("sometimes")
