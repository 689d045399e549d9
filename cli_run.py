from __future__ import annotations
import argparse
import logging
import os
from pathlib import Path

import dotenv
dotenv.load_dotenv()

from place_bridge.config import load_config
from place_bridge.models import DIRECTIONS
from place_bridge.pipeline import PlaceConversionPipeline
from place_bridge.workbook import read_entries, write_results

"""
Batch conversion of saved-place listings between Naver Map and Kakao Map.
1) load config (data/config.default.json or --config / PLACE_BRIDGE_CONFIG);
2) read entries from .csv / .xlsx ('entries' sheet) / .json;
3) convert each entry in order; per-entry failures are kept as rows;
4) write a results workbook (or CSV) and print a summary.
"""

def main(argv=None):
    root = Path(__file__).resolve().parent
    parser = argparse.ArgumentParser(description="Convert place listings between Naver Map and Kakao Map")
    parser.add_argument("--direction", required=True, choices=DIRECTIONS)
    parser.add_argument("--input", required=True, help="entries file (.csv, .xlsx, .json)")
    parser.add_argument("--output", default="results.xlsx", help="results file (.xlsx or .csv)")
    parser.add_argument("--max-distance", type=float, default=None, help="distance threshold in meters")
    parser.add_argument("--config", default=os.getenv("PLACE_BRIDGE_CONFIG") or str(root / "data" / "config.default.json"))
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    pipe = PlaceConversionPipeline(cfg)

    entries = read_entries(args.input)
    if len(entries) > cfg.max_entries:
        print(f"Only the first {cfg.max_entries} of {len(entries)} entries will be converted")

    results = pipe.convert_batch(args.direction, entries, args.max_distance)
    out = write_results(args.output, args.direction, results)

    n_ok = sum(1 for r in results if r.ok)
    n_pass = sum(1 for r in results if r.distance_pass)
    print(f"Converted: {n_ok}/{len(results)} (distance pass: {n_pass})")
    print("Results written to:", out)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
