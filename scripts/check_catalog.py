#!/usr/bin/env python3
"""
Catalog authoring check: band tiling, prescription mappings, referenced messages.
Usage:
  python scripts/check_catalog.py                 # bundled catalog (or CATALOG_PATH)
  python scripts/check_catalog.py path/to/catalog.json
"""
from __future__ import annotations

import argparse
import os
import sys

# Add project root (parent of this scripts/ folder) to sys.path so `import ttm_coach...` works anywhere
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from ttm_coach.catalog import load_catalog, validate_catalog
from ttm_coach.errors import CatalogLoadError


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a message catalog.")
    parser.add_argument("path", nargs="?", default=None, help="Catalog JSON (default: CATALOG_PATH or bundled)")
    args = parser.parse_args()

    path = args.path or (os.getenv("CATALOG_PATH") or "").strip() or None
    try:
        catalog = load_catalog(path)
    except CatalogLoadError as e:
        print(f"[catalog-check] cannot load: {e}")
        return 2

    problems = validate_catalog(catalog)
    if problems:
        print(f"[catalog-check] {catalog.source} (version {catalog.version}): {len(problems)} problem(s)")
        for p in problems:
            print(f"  - {p}")
        return 1

    print(f"[catalog-check] {catalog.source} (version {catalog.version}) OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
