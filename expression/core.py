# expression/core.py
import logging
import cv2
import numpy as np
from typing import Dict, Optional
from PIL import Image

from deepface import DeepFace
import mediapipe as mp

from expression.labels import NO_FACE_LABEL, pick_dominant, translate, translation_table

logger = logging.getLogger(__name__)

mp_face_detection = mp.solutions.face_detection

# DeepFace emotion names -> canonical expression names
_DEEPFACE_NAMES = {
    "angry": "angry",
    "disgust": "disgusted",
    "fear": "fearful",
    "happy": "happy",
    "sad": "sad",
    "surprise": "surprised",
    "neutral": "neutral",
}

class ExpressionClassifier:
    """
    MediaPipe + DeepFace pipeline:
      - face presence check (MediaPipe face detection)
      - per-expression confidence in [0,1] (DeepFace emotion model)
      - dominant expression translated to a display label
    One instance is shared by the whole process; it holds no per-request state.
    """

    def __init__(self, detector_backend: str = "retinaface", labels: str = "feasibility",
                 min_face_confidence: float = 0.5):
        self.detector_backend = detector_backend
        self.labels = labels
        self.table = translation_table(labels)
        self.min_face_confidence = min_face_confidence

    # ---------- startup ----------
    def warm_up(self) -> None:
        """Load the emotion model and the face detector so the first request doesn't pay for them."""
        logger.info("Loading DeepFace emotion model")
        try:
            DeepFace.build_model(model_name="Emotion", task="facial_attribute")
        except TypeError:
            DeepFace.build_model("Emotion")
        logger.info("Emotion model ready")

        if self.detector_backend == "skip":
            return
        logger.info("Loading face detector (backend=%s)", self.detector_backend)
        try:
            DeepFace.build_model(model_name=self.detector_backend, task="face_detector")
        except TypeError:
            # older deepface builds detectors outside DeepFace.build_model
            from deepface.detectors import FaceDetector
            FaceDetector.build_model(self.detector_backend)
        logger.info("Face detector ready")

    # ---------- detection ----------
    def detect_face(self, image_rgb: np.ndarray) -> bool:
        with mp_face_detection.FaceDetection(model_selection=1,
                                             min_detection_confidence=self.min_face_confidence) as fd:
            res = fd.process(image_rgb)
            return bool(res.detections)

    # ---------- deepface ----------
    def expression_scores(self, image_bgr: np.ndarray) -> Dict[str, float]:
        """Return canonical expression -> probability in [0,1]."""
        out = DeepFace.analyze(
            img_path=image_bgr,
            actions=["emotion"],
            detector_backend=self.detector_backend,
            enforce_detection=False
        )
        res = out[0] if isinstance(out, list) else out
        emo = res.get("emotion") or res.get("emotions") or {}

        scores = {}
        for name, val in emo.items():
            val = float(val)
            scores[_DEEPFACE_NAMES.get(name, name)] = val / 100.0 if val > 1.0 else val
        return scores

    # ---------- pipeline ----------
    def classify(self, pil_img: Image.Image) -> Optional[Dict[str, float]]:
        """Expression scores for the image, or None when no face is found."""
        img_rgb = np.array(pil_img.convert("RGB"))
        if not self.detect_face(img_rgb):
            return None
        img_bgr = cv2.cvtColor(img_rgb, cv2.COLOR_RGB2BGR)
        return self.expression_scores(img_bgr)

    def label_image(self, pil_img: Image.Image) -> str:
        scores = self.classify(pil_img)
        if not scores:
            return NO_FACE_LABEL
        return translate(pick_dominant(scores), self.table)
