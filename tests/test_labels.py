import pytest

from expression.labels import (
    CLASSIC_TRANSLATIONS,
    EXPRESSION_TRANSLATIONS,
    EXPRESSIONS,
    NO_FACE_LABEL,
    pick_dominant,
    translate,
    translation_table,
)


def test_every_expression_has_a_display_label():
    for name in EXPRESSIONS:
        assert name in EXPRESSION_TRANSLATIONS
        assert name in CLASSIC_TRANSLATIONS


def test_translate_default_table():
    assert translate("happy") == "Alegria"
    assert translate("neutral") == "Calma"
    assert translate("surprised") == "Sorpresa"


def test_negative_expressions_collapse_to_sadness():
    assert translate("sad") == translate("fearful") == translate("disgusted") == "Tristeza"


def test_unknown_label_passes_through():
    assert translate("contempt") == "contempt"
    assert translate(NO_FACE_LABEL) == NO_FACE_LABEL


def test_lookup_is_case_sensitive():
    assert translate("Happy") == "Happy"


def test_classic_table():
    assert translate("fearful", CLASSIC_TRANSLATIONS) == "Asustado"
    assert translate("happy", translation_table("classic")) == "Feliz"


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        EXPRESSION_TRANSLATIONS["happy"] = "Feliz"


def test_unknown_table_name():
    with pytest.raises(KeyError):
        translation_table("klingon")


def test_pick_dominant():
    assert pick_dominant({"happy": 0.7, "sad": 0.2, "neutral": 0.1}) == "happy"
    assert pick_dominant({"happy": 0.1, "sad": 0.2, "neutral": 0.7}) == "neutral"


def test_pick_dominant_tie_goes_to_later_key():
    assert pick_dominant({"happy": 0.5, "sad": 0.5}) == "sad"


def test_pick_dominant_empty():
    assert pick_dominant({}) is None
