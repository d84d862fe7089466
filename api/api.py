# api/api.py
import os
import io
import re
import logging
from typing import List, Optional
from datetime import datetime

from fastapi import FastAPI, UploadFile, File, Form, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from PIL import Image

import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expression.core import ExpressionClassifier
from expression.feasibility import analyze_feasibility
from expression.models import ErrorResponse, FeasibilityResponse

# ------------ Config ------------
DETECTOR_BACKEND = os.getenv("DETECTOR_BACKEND", "retinaface")
EXPRESSION_LABELS = os.getenv("EXPRESSION_LABELS", "feasibility")
MAX_IMAGES = int(os.getenv("MAX_IMAGES", "15"))
MIN_FACE_CONFIDENCE = float(os.getenv("MIN_FACE_CONFIDENCE", "0.5"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
logger = logging.getLogger(__name__)

# ------------ App ------------
app = FastAPI(title="Expression Feasibility API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

classifier = ExpressionClassifier(
    detector_backend=DETECTOR_BACKEND,
    labels=EXPRESSION_LABELS,
    min_face_confidence=MIN_FACE_CONFIDENCE,
)

def get_classifier() -> ExpressionClassifier:
    return classifier

@app.on_event("startup")
async def load_models():
    # uvicorn only starts accepting connections once this returns
    try:
        classifier.warm_up()
    except Exception:
        logger.exception("Failed to load expression models")
        raise

# ------------ Helpers ------------
def _now_iso() -> str:
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

_INT_RE = re.compile(r"-?[0-9]+")

def _parse_int(name: str, raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        raise ValueError(f"'{name}' is required")
    if not _INT_RE.fullmatch(raw.strip()):
        raise ValueError(f"'{name}' must be an integer, got '{raw}'")
    return int(raw.strip())

@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return _error(422, errors or "Invalid request")

# ------------ Endpoints ------------
@app.get("/health")
async def health():
    return {"status": "ok", "time": _now_iso(), "backend": classifier.detector_backend,
            "labels": classifier.labels, "max_images": MAX_IMAGES}

@app.post(
    "/detect-emotion",
    response_model=FeasibilityResponse,
    responses={405: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 505: {"model": ErrorResponse}},
)
async def detect_emotion(
    images: Optional[List[UploadFile]] = File(None),
    emotion_prediction: Optional[str] = Form(None, alias="emotionPrediction"),
    percentage: Optional[str] = Form(None),
    consecutive_recognition: Optional[str] = Form(None, alias="consecutiveRecognitionSuccess"),
    analyzer: ExpressionClassifier = Depends(get_classifier),
):
    if not images:
        return _error(405, "No images were sent")
    if len(images) > MAX_IMAGES:
        return _error(422, f"Too many images: {len(images)} sent, at most {MAX_IMAGES} allowed")

    if emotion_prediction is None or not emotion_prediction.strip():
        return _error(422, "'emotionPrediction' is required")
    try:
        min_percentage = _parse_int("percentage", percentage)
        min_consecutive = _parse_int("consecutiveRecognitionSuccess", consecutive_recognition)
    except ValueError as e:
        return _error(422, str(e))

    logger.info("Analyzing %d image(s) for '%s'", len(images), emotion_prediction)

    results = {}
    try:
        # sequential on purpose: the consecutive criterion depends on submission order
        for i, upload in enumerate(images, start=1):
            raw = await upload.read()
            pil = Image.open(io.BytesIO(raw)).convert("RGB")
            # one image at a time, but off the event loop
            label = await run_in_threadpool(analyzer.label_image, pil)
            logger.debug("emotion_%d (%s): %s", i, upload.filename, label)
            results[f"emotion_{i}"] = label
    except Exception:
        logger.exception("Error while loading or processing the images")
        return _error(505, "Error processing the images.")

    res = analyze_feasibility(emotion_prediction, results, min_percentage, min_consecutive)
    return FeasibilityResponse(**res.__dict__)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3001")))
