import pytest

from ttm_coach.dimensions import Stage, SubDimension
from ttm_coach.errors import InvalidInputShape
from ttm_coach.scoring import RawAnswers, Scores, aggregate_scores, default_answers


def test_aggregate_sums_each_facet(catalog, answers_payload):
    raw = RawAnswers.from_payload(answers_payload(
        "A",
        risci={"stress": [5, 5, 5], "coping": [1, 2, 3]},
        sma={"planning": [2, 2], "reframing": [3, 2], "healthy": [4, 4]},
        pssm=[1, 2, 3, 4, 5],
    ))
    scores = aggregate_scores(raw, catalog)

    assert scores.stage is Stage.A
    assert scores[SubDimension.RISCI_STRESS] == 15
    assert scores[SubDimension.RISCI_COPING] == 6
    assert scores[SubDimension.SMA_PLANNING] == 4
    assert scores[SubDimension.SMA_REFRAMING] == 5
    assert scores[SubDimension.SMA_HEALTHY_ACTIVITY] == 8
    assert scores[SubDimension.PSSM_SELF_EFFICACY] == 15
    assert scores[SubDimension.PDSM_PROS] == 9


def test_healthy_activity_key_accepted(catalog, answers_payload):
    payload = answers_payload()
    payload["sma"] = {"planning": [3, 3], "reframing": [3, 3], "healthy_activity": [5, 5]}
    scores = aggregate_scores(RawAnswers.from_payload(payload), catalog)
    assert scores[SubDimension.SMA_HEALTHY_ACTIVITY] == 10


def test_pssm_as_object(catalog, answers_payload):
    raw = RawAnswers.from_payload(answers_payload(pssm={"self_efficacy": [4, 4, 4, 4, 4]}))
    assert aggregate_scores(raw, catalog)[SubDimension.PSSM_SELF_EFFICACY] == 20


def test_unanswered_item_rejected(catalog, answers_payload):
    raw = RawAnswers.from_payload(answers_payload(pdsm={"pros": [3, None, 3], "cons": [3, 3, 3]}))
    assert raw.missing_items() == {"PDSM.pros": [1]}
    assert not raw.is_complete()
    with pytest.raises(InvalidInputShape, match="PDSM.pros"):
        aggregate_scores(raw, catalog)


def test_wrong_item_count_rejected(catalog, answers_payload):
    raw = RawAnswers.from_payload(answers_payload(risci={"stress": [3, 3], "coping": [3, 3, 3]}))
    with pytest.raises(InvalidInputShape, match="expected 3 answers"):
        aggregate_scores(raw, catalog)


@pytest.mark.parametrize("bad", [0, 6, "3", 2.5, True])
def test_non_likert_value_rejected(catalog, answers_payload, bad):
    raw = RawAnswers.from_payload(answers_payload(sma={"planning": [3, bad]}))
    with pytest.raises(InvalidInputShape):
        aggregate_scores(raw, catalog)


def test_missing_section_rejected(answers_payload):
    payload = answers_payload()
    del payload["ppsm"]
    with pytest.raises(InvalidInputShape, match="PPSM.experiential"):
        RawAnswers.from_payload(payload)


def test_unknown_stage_rejected(answers_payload):
    with pytest.raises(InvalidInputShape):
        RawAnswers.from_payload(answers_payload(stage="XX"))


def test_scores_from_payload_requires_integers(scores_payload):
    with pytest.raises(InvalidInputShape, match="RISCI.stress"):
        Scores.from_payload(scores_payload(risci={"stress": "9"}))


def test_scores_check_ranges(catalog, make_scores):
    make_scores().check_ranges(catalog)
    with pytest.raises(InvalidInputShape, match="outside 3..15"):
        make_scores(risci={"stress": 16}).check_ranges(catalog)
    with pytest.raises(InvalidInputShape, match="outside 2..10"):
        make_scores(sma={"planning": 1}).check_ranges(catalog)


def test_scores_payload_roundtrip_shape(scores_payload):
    payload = scores_payload("M")
    assert Scores.from_payload(payload).to_payload() == payload


def test_default_answers_are_neutral_and_complete(catalog):
    raw = default_answers(catalog)
    assert raw.stage is Stage.C
    assert raw.is_complete()
    assert len(raw.answers[SubDimension.PSSM_SELF_EFFICACY]) == 5
    assert all(v == 3 for items in raw.answers.values() for v in items)


def test_blank_form_reports_every_item_missing(catalog):
    raw = default_answers(catalog, fill=None)
    missing = raw.missing_items()
    assert missing["RISCI.stress"] == [0, 1, 2]
    assert len(missing) == 10
