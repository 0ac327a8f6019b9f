from ttm_coach.debug_utils import debug_log


def test_debug_lines_hidden_unless_enabled(monkeypatch, capsys):
    monkeypatch.delenv("TTM_COACH_DEBUG", raising=False)
    debug_log("quiet", {"a": 1}, tag="engine")
    assert capsys.readouterr().out == ""

    monkeypatch.setenv("TTM_COACH_DEBUG", "yes")
    debug_log("picked", {"slot": "header", "id": "HEADER.STAGE"}, tag="engine")
    assert capsys.readouterr().out == '[engine] picked :: {"id": "HEADER.STAGE", "slot": "header"}\n'


def test_always_lines_print_without_debug(monkeypatch, capsys):
    monkeypatch.setenv("TTM_COACH_DEBUG", "0")
    debug_log("catalog 2024.2 loaded", tag="catalog", always=True)
    assert capsys.readouterr().out == "[catalog] catalog 2024.2 loaded\n"


def test_unserialisable_payload_falls_back_to_repr(monkeypatch, capsys):
    monkeypatch.setenv("TTM_COACH_DEBUG", "1")
    debug_log("odd", {1: float("nan"), "k": {1, 2}}, tag="x")
    out = capsys.readouterr().out
    assert out.startswith("[x] odd :: ")
