# expression/models.py
from dataclasses import dataclass, field
from typing import Dict
from pydantic import BaseModel

@dataclass
class FeasibilityResult:
    success: bool
    reliability: float
    consecutive_recognition: int
    emotion_prediction: str
    results: Dict[str, str] = field(default_factory=dict)

class FeasibilityResponse(BaseModel):
    success: bool
    reliability: float
    consecutive_recognition: int
    emotion_prediction: str
    results: Dict[str, str]

class ErrorResponse(BaseModel):
    error: str
