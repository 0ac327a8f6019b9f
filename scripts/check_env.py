#!/usr/bin/env python3
"""
Environment check for production deploys.
Usage: python scripts/check_env.py --service api
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, List, Tuple


REQUIRED_API: List[Tuple[str, ...]] = [
    ("ENV",),
    ("DATABASE_URL",),
]

# Work chat, tone rewrite and example evaluation answer 503 without a key.
REQUIRED_LLM: List[Tuple[str, ...]] = [
    ("OPENAI_API_KEY",),
]

OPTIONAL_API = [
    "LLM_MODEL",
    "REVIEW_MODEL",
    "CATALOG_PATH",
    "SELF_EFFICACY_POLICY",
    "TTM_COACH_DEBUG",
]

POLICIES = {"stage_conditional", "always_banded"}


def _is_set(key: str) -> bool:
    return bool((os.getenv(key) or "").strip())


def _missing(groups: Iterable[Tuple[str, ...]]) -> List[str]:
    missing: List[str] = []
    for group in groups:
        if any(_is_set(k) for k in group):
            continue
        if len(group) == 1:
            missing.append(group[0])
        else:
            missing.append(" | ".join(group))
    return missing


def _warn_optional(keys: Iterable[str]) -> None:
    missing = [k for k in keys if not _is_set(k)]
    if not missing:
        return
    print("[env-check] Optional vars missing:")
    for k in missing:
        print(f"  - {k}")


def _invalid_values() -> List[str]:
    problems: List[str] = []
    policy = (os.getenv("SELF_EFFICACY_POLICY") or "").strip().lower()
    if policy and policy not in POLICIES:
        problems.append(f"SELF_EFFICACY_POLICY={policy!r} (expected one of {sorted(POLICIES)})")
    catalog_path = (os.getenv("CATALOG_PATH") or "").strip()
    if catalog_path and not os.path.isfile(catalog_path):
        problems.append(f"CATALOG_PATH={catalog_path!r} does not exist")
    return problems


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate required environment variables.")
    parser.add_argument(
        "--service",
        default="api",
        choices=["api"],
        help="Which service to validate (default: api)",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Allow a deploy without OPENAI_API_KEY (LLM endpoints disabled)",
    )
    parser.add_argument(
        "--warn-optional",
        action="store_true",
        help="Also list optional variables that are missing",
    )
    args = parser.parse_args()

    if args.service != "api":
        print("[env-check] Unknown service")
        return 2

    groups = list(REQUIRED_API)
    if not args.no_llm:
        groups.extend(REQUIRED_LLM)
    missing = _missing(groups)
    if missing:
        print("[env-check] Missing required environment variables:")
        for item in missing:
            print(f"  - {item}")
        return 1

    invalid = _invalid_values()
    if invalid:
        print("[env-check] Invalid values:")
        for item in invalid:
            print(f"  - {item}")
        return 1

    if args.warn_optional:
        _warn_optional(OPTIONAL_API)

    print("[env-check] OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
