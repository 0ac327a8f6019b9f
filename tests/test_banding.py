import itertools

import pytest

from ttm_coach.banding import band_labels, band_of, classify, stage_name
from ttm_coach.catalog import BandRange
from ttm_coach.dimensions import Stage, SubDimension
from ttm_coach.errors import BandNotFound


def test_every_valid_score_gets_exactly_one_band(catalog):
    for dim in SubDimension:
        banding = catalog.banding(dim)
        for value in range(banding.min_score, banding.max_score + 1):
            hits = [r.id for r in banding.ranges if r.contains(value)]
            assert len(hits) == 1, (dim.path, value, hits)
            assert band_of(banding.ranges, value) == hits[0]


def test_band_boundaries_are_inclusive():
    ranges = [BandRange("LOW", "low", 3, 7, True), BandRange("HIGH", "high", 8, 15, False)]
    assert band_of(ranges, 7) == "LOW"
    assert band_of(ranges, 8) == "HIGH"
    assert band_of(ranges, 15) == "HIGH"


def test_out_of_range_raises_band_not_found():
    ranges = [BandRange("LOW", "low", 3, 7, True)]
    with pytest.raises(BandNotFound) as exc:
        band_of(ranges, 2, dimension="RISCI.stress")
    assert exc.value.dimension == "RISCI.stress"
    assert exc.value.value == 2


def test_classify_stress_prescription(catalog, make_scores):
    bands = classify(make_scores(risci={"stress": 15, "coping": 13}), catalog)
    assert bands[SubDimension.RISCI_STRESS] == "HIGH"
    assert bands.prescription(SubDimension.RISCI_STRESS) == "ATTN"
    assert bands[SubDimension.RISCI_COPING] == "HIGH"
    assert bands.prescription(SubDimension.RISCI_COPING) == "OK"


def test_classify_rejects_score_outside_catalog(catalog, make_scores):
    with pytest.raises(BandNotFound):
        classify(make_scores(pssm={"self_efficacy": 26}), catalog)


def test_missing_prescription_mapping_is_an_error(make_catalog, make_scores):
    def drop_high(data):
        del data["bands"]["RISCI"]["stress"]["prescription_collapsed"]["HIGH"]

    with pytest.raises(BandNotFound, match="prescription"):
        classify(make_scores(risci={"stress": 12}), make_catalog(drop_high))


def test_bands_payload_shape(catalog, make_scores):
    payload = classify(make_scores("A"), catalog).to_payload()
    assert payload["stage"] == "A"
    assert payload["SMA"] == {"planning": "MID", "reframing": "MID", "healthy_activity": "MID"}
    assert payload["RISCI_presc"] == {"stress": "OK", "coping": "OK"}
    assert set(payload) == {"stage", "RISCI", "SMA", "PSSM", "PDSM", "PPSM", "RISCI_presc"}


def test_band_labels(catalog, make_scores):
    labels = band_labels(classify(make_scores("PC", pdsm={"cons": 14}), catalog), catalog)
    assert labels["stage"] == "Precontemplation"
    assert labels["PDSM"]["cons"] == "Needs attention"
    assert labels["PDSM"]["pros"] == "Average"


@pytest.mark.parametrize("stage,name", [
    (Stage.PC, "Precontemplation"),
    ("C", "Contemplation"),
    ("pr", "Preparation"),
    (Stage.A, "Action"),
    (Stage.M, "Maintenance"),
])
def test_stage_name(stage, name):
    assert stage_name(stage) == name


def test_classify_covers_all_band_combinations_for_sma(catalog, make_scores):
    # one representative score per SMA band
    reps = {"LOW": 3, "MID": 7, "HIGH": 9}
    for p, r, h in itertools.product(reps, repeat=3):
        bands = classify(
            make_scores(sma={"planning": reps[p], "reframing": reps[r], "healthy_activity": reps[h]}),
            catalog,
        )
        assert (bands[SubDimension.SMA_PLANNING], bands[SubDimension.SMA_REFRAMING],
                bands[SubDimension.SMA_HEALTHY_ACTIVITY]) == (p, r, h)
