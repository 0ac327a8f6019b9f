from ttm_coach.catalog import MessageRecord
from ttm_coach.templates import interpolate, render_message


def test_interpolate_replaces_known_variables():
    assert interpolate("Stage: {{stage_label}}", {"stage_label": "Action"}) == "Stage: Action"


def test_interpolate_tolerates_spaces_in_braces():
    assert interpolate("{{ name }}!", {"name": "Sam"}) == "Sam!"


def test_interpolate_missing_and_none_become_empty():
    assert interpolate("[{{a}}|{{b}}]", {"b": None}) == "[|]"
    assert interpolate("{{a}}", None) == ""
    assert interpolate(None, {"a": 1}) == ""


def test_interpolate_leaves_other_text_alone():
    assert interpolate("{single} {{n}}", {"n": 3}) == "{single} 3"


def test_render_message():
    rec = MessageRecord(
        id="HEADER.STAGE",
        title="Stage {{stage}}",
        body="You are in {{stage_label}}.",
        suggested_actions=("one", "two"),
    )
    out = render_message(rec, {"stage": "PR", "stage_label": "Preparation"}, slot="header")
    assert out.to_payload() == {
        "id": "HEADER.STAGE",
        "slot": "header",
        "title": "Stage PR",
        "body": "You are in Preparation.",
        "suggested_actions": ["one", "two"],
    }
