# expression/feasibility.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from expression.models import FeasibilityResult


def _round2(value: float) -> float:
    # half-up on the exact binary value, 1/32 -> 3.13
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def analyze_feasibility(
    emotion_prediction: str,
    results: Dict[str, str],
    percentage: float,
    consecutive_recognition: int,
) -> FeasibilityResult:
    """
    Decide whether `emotion_prediction` was exhibited across an ordered batch of labels.

    Two independent criteria, either one is enough:
      - reliability: share of labels matching the prediction, strictly above `percentage`
      - consecutive run: a streak of matches reaching `consecutive_recognition`

    The run walk stops as soon as the streak reaches the threshold, and a mismatch
    resets it, so the reported streak is the one current when iteration ended,
    not the longest seen.
    """
    target = emotion_prediction.lower()

    hits = sum(1 for label in results.values() if label.lower() == target)
    reliability = hits / len(results) * 100 if results else 0.0

    streak = 0
    for label in results.values():
        if label.lower() == target:
            streak += 1
            if streak >= consecutive_recognition:
                break
        else:
            streak = 0

    return FeasibilityResult(
        success=reliability > percentage or streak >= consecutive_recognition,
        reliability=_round2(reliability),
        consecutive_recognition=streak,
        emotion_prediction=emotion_prediction,
        results=results,
    )
