# expression/labels.py
from types import MappingProxyType
from typing import Mapping, Optional

NO_FACE_LABEL = "No se detectó ninguna cara en la imagen."

# Canonical vocabulary produced by ExpressionClassifier
EXPRESSIONS = ("neutral", "happy", "sad", "angry", "fearful", "disgusted", "surprised")

# One display label per expression
CLASSIC_TRANSLATIONS = MappingProxyType({
    "neutral": "Neutral",
    "happy": "Feliz",
    "sad": "Triste",
    "angry": "Enojado",
    "fearful": "Asustado",
    "disgusted": "Disgustado",
    "surprised": "Sorprendido",
})

# Reduced set used for feasibility checks: fear and disgust count as sadness
EXPRESSION_TRANSLATIONS = MappingProxyType({
    "neutral": "Calma",
    "happy": "Alegria",
    "sad": "Tristeza",
    "angry": "Enojo",
    "fearful": "Tristeza",
    "disgusted": "Tristeza",
    "surprised": "Sorpresa",
})

TRANSLATION_TABLES = MappingProxyType({
    "feasibility": EXPRESSION_TRANSLATIONS,
    "classic": CLASSIC_TRANSLATIONS,
})


def translation_table(name: str) -> Mapping[str, str]:
    try:
        return TRANSLATION_TABLES[name]
    except KeyError:
        raise KeyError(
            f"Unknown label table '{name}' (expected one of: {', '.join(TRANSLATION_TABLES)})"
        ) from None


def translate(label: str, table: Mapping[str, str] = EXPRESSION_TRANSLATIONS) -> str:
    """Display label for `label`; labels missing from the table come back as-is."""
    return table.get(label, label)


def pick_dominant(scores: Mapping[str, float]) -> Optional[str]:
    """Arg-max over expression scores. Ties go to the later key."""
    best = None
    for name in scores:
        if best is None or not scores[best] > scores[name]:
            best = name
    return best
