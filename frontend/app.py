"""Ask-AI - Streamlit Interface.

Thin client for the question-answering API. All model logic lives in the
FastAPI backend. This file handles:
  - model selection (ids fetched from /health)
  - optional image upload alongside the question
  - POST /api/ask-ai as multipart/form-data with loading states
"""

import os
import time

import requests
import streamlit as st

# Config
API_URL = os.environ.get("API_URL", "http://localhost:8000")
ASK_ENDPOINT = f"{API_URL}/api/ask-ai"
HEALTH_ENDPOINT = f"{API_URL}/health"

FALLBACK_MODELS = ["gemini-1.5-flash", "packagetestv2-nettsfkvxpqs"]

# Page setup
st.set_page_config(
    page_title="Ask-AI",
    layout="centered",
)

st.markdown("""
<style>
    .stApp {
        max-width: 900px;
        margin: 0 auto;
    }
    div[data-testid="stImage"] {
        border-radius: 8px;
        overflow: hidden;
        border: 1px solid rgba(128, 128, 128, 0.2);
    }
</style>
""", unsafe_allow_html=True)


def init_session():
    """Initialize session state on first load."""
    if "models" not in st.session_state:
        st.session_state.models = fetch_models()
    if "answers" not in st.session_state:
        st.session_state.answers = []


def fetch_models() -> list[str]:
    """Ask the backend which model ids it accepts."""
    try:
        resp = requests.get(HEALTH_ENDPOINT, timeout=3)
        if resp.status_code == 200:
            models = resp.json().get("models") or []
            if models:
                return models
    except requests.RequestException:
        pass  # Backend asleep or unreachable - use the static list

    return FALLBACK_MODELS


def ask(question: str, model: str, image) -> tuple[str | None, str | None]:
    """POST the form and return (answer, error)."""
    data = {"question": question, "model": model}
    files = None
    if image is not None:
        files = {"image": (image.name, image.getvalue(), image.type or "application/octet-stream")}

    try:
        resp = requests.post(ASK_ENDPOINT, data=data, files=files, timeout=90)
    except requests.Timeout:
        return None, "[TIMEOUT] Request timed out. The server may be overloaded."
    except requests.ConnectionError:
        return None, "[CONNECTION] Cannot reach the API. Is the backend running?"

    try:
        body = resp.json()
    except ValueError:
        return None, f"[ERROR] Server error ({resp.status_code}). Please try again."

    if resp.status_code == 200:
        return body.get("answer", ""), None
    return None, f"[ERROR] {body.get('error', f'Server error ({resp.status_code}).')}"


def main():
    init_session()

    st.title("Ask-AI")
    st.caption("Ask a question, optionally about an image.")

    with st.form("ask_form", clear_on_submit=False):
        model = st.selectbox("Model", st.session_state.models)
        question = st.text_area("Question", placeholder="What is in this picture?")
        image = st.file_uploader("Image (optional)", type=["png", "jpg", "jpeg", "webp", "heic"])
        submitted = st.form_submit_button("Ask")

    if submitted:
        if image is not None:
            st.image(image.getvalue(), caption=image.name, use_container_width=True)

        with st.status("Thinking...", expanded=False) as status:
            start_time = time.monotonic()
            answer, error = ask(question, model, image)
            latency_ms = int((time.monotonic() - start_time) * 1000)

            if error:
                status.update(label="Error", state="error")
            else:
                status.update(label=f"[TIME] {latency_ms}ms | [MODEL] {model}", state="complete")

        if error:
            st.error(error)
        else:
            st.session_state.answers.insert(0, {"question": question, "model": model, "answer": answer})

    for item in st.session_state.answers:
        with st.chat_message("user"):
            st.markdown(item["question"])
        with st.chat_message("assistant"):
            st.markdown(item["answer"])
            st.caption(item["model"])


main()
