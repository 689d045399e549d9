from __future__ import annotations
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from .models import ConversionResult

TABLE_SCHEMAS: Dict[str, List[str]] = {
    "entries": ["index", "name", "address", "sourceUrl", "rawBlock"],
    "results": [
        "index", "name", "address", "sourceUrl", "ok",
        "targetUrl", "targetName", "targetAddress",
        "sourceLat", "sourceLng", "targetLat", "targetLng",
        "distanceMeters", "distancePass", "error",
    ],
    "meta": ["key", "value"],
}

def _now_str() -> str:
    return datetime.utcnow().isoformat(timespec="seconds")

def _ensure_columns(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    result = df.copy()
    for col in columns:
        if col not in result.columns:
            result[col] = None
    return result[columns]

def _clean_value(val: Any) -> Any:
    if val is None:
        return None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    return val

def _row_to_dict(row: pd.Series) -> Dict[str, Any]:
    return {k: _clean_value(v) for k, v in row.to_dict().items()}

def read_entries(path: str | Path) -> List[Any]:
    """Load raw entry rows (.xlsx 'entries' sheet, .csv or .json) for sanitize_entry.

    JSON rows are passed through as-is so that row positions stay aligned with
    the input; sanitize_entry turns non-object rows into empty entries.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        raw = json.loads(p.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("entries", [])
        return list(raw) if isinstance(raw, list) else []

    if suffix == ".csv":
        df = pd.read_csv(p, dtype=str, keep_default_na=False)
    else:
        xls = pd.read_excel(p, sheet_name=None, dtype=str)
        df = xls.get("entries")
        if df is None:
            # single-sheet workbooks: take the first sheet
            df = next(iter(xls.values()), pd.DataFrame())
    df = _ensure_columns(df, TABLE_SCHEMAS["entries"])
    return [_row_to_dict(row) for _, row in df.iterrows()]

def results_frame(results: Sequence[ConversionResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        d = r.to_dict()
        src = d.pop("source")
        row = {
            "index": src["index"],
            "name": src["name"],
            "address": src["address"],
            "sourceUrl": src["sourceUrl"],
        }
        row.update(d)
        rows.append(row)
    return _ensure_columns(pd.DataFrame(rows), TABLE_SCHEMAS["results"])

def write_results(path: str | Path, direction: str, results: Sequence[ConversionResult]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    df = results_frame(results)
    if p.suffix.lower() == ".csv":
        df.to_csv(p, index=False, encoding="utf-8-sig")
        return p

    meta = pd.DataFrame(
        [{"key": "direction", "value": direction},
         {"key": "generated_at", "value": _now_str()}],
        columns=TABLE_SCHEMAS["meta"],
    )
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="results", index=False)
        meta.to_excel(writer, sheet_name="meta", index=False)
    return p
