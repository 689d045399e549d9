from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any
import dotenv
dotenv.load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from place_bridge.config import load_config
from place_bridge.errors import InvalidInput, error_message
from place_bridge.pipeline import PlaceConversionPipeline
from place_bridge.utils import normalize_space

ROOT = Path(__file__).resolve().parent
DATA_DIR = ROOT / "data"

logger = logging.getLogger(__name__)

cfg = load_config(os.getenv("PLACE_BRIDGE_CONFIG") or DATA_DIR / "config.default.json")
pipeline = PlaceConversionPipeline(cfg)

app = FastAPI(title="Naver/Kakao Place Conversion Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["content-type"],
)


class ConvertRequest(BaseModel):
    # validated by the pipeline so malformed values get the same 400 messages
    direction: Any = None
    entries: Any = None
    maxDistanceMeters: Any = None


@app.post("/api/convert")
def convert_entries(payload: ConvertRequest):
    try:
        max_distance = pipeline.resolve_max_distance(payload.maxDistanceMeters)
        results = pipeline.convert_batch(payload.direction, payload.entries, max_distance)
    except InvalidInput as exc:
        return JSONResponse({"error": error_message(exc)}, status_code=400)
    except Exception as exc:
        logger.exception("Batch conversion failed")
        return JSONResponse({"error": error_message(exc)}, status_code=500)

    return {
        "ok": True,
        "direction": normalize_space(payload.direction),
        "maxDistanceMeters": max_distance,
        "results": [r.to_dict() for r in results],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8008"))
    uvicorn.run(app, host=host, port=port)
