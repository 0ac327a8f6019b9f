#!/usr/bin/env python3
"""
Run canned answer sets through the feedback pipeline *in-process* (no HTTP, no DB).
Prints the selected message ids per slot and the work-plan rules trace.
Usage:
  python scripts/run_scenarios.py stressed_planner
  python scripts/run_scenarios.py --batch
  python scripts/run_scenarios.py --batch --policy always_banded
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Dict

# Add project root (parent of this scripts/ folder) to sys.path so `import ttm_coach...` works anywhere
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from ttm_coach.catalog import load_catalog
from ttm_coach.scoring import RawAnswers, aggregate_scores
from ttm_coach.selector import select_messages
from ttm_coach.work_skeleton import build_work_skeleton


def _answers(stage: str, stress, coping, planning, reframing, healthy, pssm, pros, cons, exp, beh) -> dict:
    return {
        "stage": stage,
        "risci": {"stress": stress, "coping": coping},
        "sma": {"planning": planning, "reframing": reframing, "healthy": healthy},
        "pssm": pssm,
        "pdsm": {"pros": pros, "cons": cons},
        "ppsm": {"experiential": exp, "behavioral": beh},
    }


SCENARIOS: Dict[str, dict] = {
    # not yet interested, low stress, everything else neutral
    "unaware": _answers("PC", [2, 2, 2], [3, 3, 3], [3, 3], [3, 3], [3, 3],
                        [3] * 5, [2, 2, 2], [3, 3, 3], [2] * 5, [2] * 5),
    # torn between pros and cons, low confidence
    "ambivalent": _answers("C", [3, 3, 4], [2, 3, 2], [2, 3], [3, 3], [3, 4],
                           [2] * 5, [3, 3, 3], [4, 4, 5], [3] * 5, [2] * 5),
    # high stress, weak planning: micro-intervention + planning basics
    "stressed_planner": _answers("PR", [5, 5, 5], [2, 2, 2], [2, 2], [2, 3], [4, 4],
                                 [2, 2, 3, 2, 2], [4, 4, 4], [4, 5, 4], [3] * 5, [2] * 5),
    # acting and doing well
    "steady_action": _answers("A", [2, 2, 2], [4, 4, 5], [4, 5], [4, 4], [5, 4],
                              [4] * 5, [5, 4, 5], [2, 2, 2], [4] * 5, [5] * 5),
    # maintaining, one weak SMA facet
    "maintainer": _answers("M", [3, 3, 3], [4, 4, 4], [4, 4], [4, 4], [2, 2],
                           [4] * 5, [4, 4, 4], [2, 2, 3], [4] * 5, [4] * 5),
}


def run_one(name: str, catalog, policy: str, as_json: bool) -> None:
    raw = RawAnswers.from_payload(SCENARIOS[name])
    scores = aggregate_scores(raw, catalog)
    selection = select_messages(scores, catalog, policy=policy)
    result = build_work_skeleton(scores, catalog, bands=selection.bands)
    if as_json:
        print(json.dumps({
            "scenario": name,
            "messages": selection.to_payload(),
            "work": result.to_payload(),
        }, ensure_ascii=False, indent=2))
        return
    print(f"\n=== {name} (stage {scores.stage.value}, policy {policy}) ===")
    for item in selection.items:
        print(f"  {item.slot:<22} {item.id}")
    print(f"  sma_focus: {result.sma_focus.key if result.sma_focus else '-'}")
    print(f"  today_action: {result.skeleton.today_action.id}")
    print(f"  cards: {', '.join(result.skeleton.cards.keys())}")
    for line in result.skeleton.rules_trace:
        print(f"  trace: {line}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run canned scenarios through the feedback pipeline (in-process).")
    parser.add_argument("scenario", nargs="?", choices=sorted(SCENARIOS), help="Scenario key. Use --batch to run all.")
    parser.add_argument("--batch", action="store_true", help="Run all scenarios in sequence.")
    parser.add_argument("--catalog", default=None, help="Catalog JSON (default: bundled)")
    parser.add_argument("--policy", default="stage_conditional", choices=["stage_conditional", "always_banded"])
    parser.add_argument("--json", action="store_true", help="Print full JSON payloads")
    args = parser.parse_args()

    if not args.batch and not args.scenario:
        parser.error("scenario required unless --batch is given")

    catalog = load_catalog(args.catalog)
    names = sorted(SCENARIOS) if args.batch else [args.scenario]
    for name in names:
        run_one(name, catalog, args.policy, args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
