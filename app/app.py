# app.py
import os
import streamlit as st
from PIL import Image
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from expression.core import ExpressionClassifier
from expression.feasibility import analyze_feasibility
from expression.labels import TRANSLATION_TABLES, translation_table

MAX_IMAGES = int(os.getenv("MAX_IMAGES", "15"))

# ---------- Page ----------
st.set_page_config(page_title="Expression Feasibility", page_icon="🎭", layout="centered")
st.title("Expression Feasibility Checker")
st.caption("Upload a sequence of face images → dominant expression per image → was the target expression shown?")

# ---------- Analyzer ----------
@st.cache_resource
def load_classifier(backend: str, labels: str) -> ExpressionClassifier:
    clf = ExpressionClassifier(detector_backend=backend, labels=labels)
    clf.warm_up()
    return clf

# ---------- Sidebar ----------
with st.sidebar:
    st.header("Settings")
    backend = st.selectbox("DeepFace detector backend", ["retinaface", "opencv", "mtcnn", "ssd"])
    labels = st.selectbox("Label table", list(TRANSLATION_TABLES))
    percentage = st.number_input("Reliability threshold (%)", value=50, step=1)
    consecutive = st.number_input("Consecutive recognitions", value=3, step=1)

analyzer = load_classifier(backend, labels)
display_labels = sorted(set(translation_table(labels).values()))

emotion_prediction = st.selectbox("Target expression", display_labels)
files = st.file_uploader("Upload images (in order)", type=["jpg", "jpeg", "png"], accept_multiple_files=True)

if files and len(files) > MAX_IMAGES:
    st.warning(f"Only the first {MAX_IMAGES} images are analyzed.")
    files = files[:MAX_IMAGES]

if files and st.button("🔍 Analyze"):
    results = {}
    try:
        with st.spinner("Detecting expressions..."):
            for i, f in enumerate(files, start=1):
                results[f"emotion_{i}"] = analyzer.label_image(Image.open(f).convert("RGB"))
    except Exception as e:
        st.error(f"Analysis error: {e}")
        st.stop()

    res = analyze_feasibility(emotion_prediction, results, int(percentage), int(consecutive))

    if res.success:
        st.success(f"'{res.emotion_prediction}' recognized")
    else:
        st.error(f"'{res.emotion_prediction}' not recognized")
    col1, col2 = st.columns(2)
    col1.metric("Reliability", f"{res.reliability:.2f}%")
    col2.metric("Consecutive recognitions", res.consecutive_recognition)

    cols = st.columns(min(len(files), 5))
    for i, f in enumerate(files):
        cols[i % len(cols)].image(f.getvalue(), caption=results[f"emotion_{i + 1}"], use_column_width=True)

    with st.expander("Details (JSON preview)"):
        st.json(res.__dict__)
