"""Streamlit UI for the AI tutorial API with chat-style input/output.

- Sidebar controls (API URL, mode, RAG top-k, show raw, clear chat)
- Chat bubbles using st.chat_message
- Single-turn backend call to /api/v1/chat/generate or /api/v1/rag/query
  (UI stores history locally)
- Renders the response envelope: data on success, message and data on failure
"""
import os
import time
import json
import requests
import streamlit as st

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/")

MODES = {
    "Chat": ("/api/v1/chat/generate", "prompt"),
    "RAG (consultancy FAQ)": ("/api/v1/rag/query", "query"),
}

st.set_page_config(page_title="AI Tutorial", page_icon="🤖", layout="wide")

# Initialize chat history
if "messages" not in st.session_state:
    # Each item: {"role": "user"|"assistant", "content": str, ...}
    st.session_state.messages = []
if "thinking" not in st.session_state:
    st.session_state.thinking = False
if "pending_prompt" not in st.session_state:
    st.session_state.pending_prompt = None

st.title("AI Tutorial: Chat and RAG")
st.caption(
    "Chat answers directly (with input sanitization and content filtering); "
    "RAG answers from the most similar passages of the indexed documents."
)

with st.sidebar:
    st.subheader("Settings")
    api_url = st.text_input("API Base URL", value=API_BASE_URL, help="Backend FastAPI base URL")
    mode = st.radio("Mode", list(MODES), index=0)
    top_k = st.slider(
        "RAG passages (top-k)",
        min_value=1,
        max_value=20,
        value=2,
        help="Number of similar chunks injected into the RAG prompt",
    )
    show_raw = st.checkbox("Show raw response", value=False)
    if st.button("Clear chat"):
        st.session_state.messages = []
        st.session_state.thinking = False
        st.session_state.pending_prompt = None
        st.rerun()


def health_check(url: str) -> bool:
    """Return True if the backend health endpoint responds OK."""
    try:
        r = requests.get(f"{url}/health", timeout=5)
        return r.ok
    except requests.RequestException as e:
        st.info(e)
        return False


def render_assistant(m: dict) -> None:
    if m.get("success"):
        st.markdown(m.get("content") or "_No answer returned._")
    else:
        st.error(f"{m.get('message', 'Request failed')}: {m.get('content', '')}")
    st.caption(f"Mode: {m.get('mode')} • Latency: {m.get('latency_ms')} ms")


ok = health_check(api_url)
if not ok:
    st.warning(
        f"Backend health check failed at {api_url}/health. "
        "Start it with 'uvicorn ai_tutorial.main:app --reload'."
    )

# Render existing chat history
for m in st.session_state.messages:
    with st.chat_message(m["role"]):
        if m["role"] == "assistant":
            render_assistant(m)
        else:
            st.markdown(m.get("content", ""))

# Chat input, disabled while thinking
if st.session_state.thinking:
    st.chat_input("Ask something...", disabled=True, key="disabled_input")
else:
    prompt = st.chat_input("Ask something...", key="enabled_input")
    if prompt:
        st.session_state.messages.append({"role": "user", "content": prompt})
        with st.chat_message("user"):
            st.markdown(prompt)
        st.session_state.pending_prompt = prompt
        st.session_state.thinking = True
        st.rerun()

# Process pending request when thinking; keep input disabled during this phase
if st.session_state.thinking and st.session_state.pending_prompt:
    pending = st.session_state.pending_prompt
    path, field = MODES[mode]
    payload = {field: pending}
    if field == "query":
        payload["top_k"] = int(top_k)

    with st.chat_message("assistant"):
        if not ok:
            st.info("Backend is not healthy yet. Start the API and try again.")
        else:
            with st.spinner("Thinking..."):
                t0 = time.time()
                try:
                    resp = requests.post(f"{api_url}{path}", json=payload, timeout=90)
                    dt_ms = int((time.time() - t0) * 1000.0)
                    try:
                        envelope = resp.json()
                    except ValueError:
                        st.error(f"Response was not valid JSON ({resp.status_code}).")
                        st.code(resp.text or "", language="json")
                        envelope = {"success": False, "message": f"HTTP {resp.status_code}", "data": resp.text}

                    msg = {
                        "role": "assistant",
                        "success": bool(envelope.get("success")),
                        "message": envelope.get("message", ""),
                        "content": envelope.get("data") or "",
                        "mode": mode,
                        "latency_ms": dt_ms,
                    }
                    render_assistant(msg)
                    if show_raw:
                        st.code(json.dumps(envelope, indent=2), language="json")
                    st.session_state.messages.append(msg)
                except requests.RequestException as e:
                    st.error(f"Error calling API: {e}")

    # Clear state and rerun to re-enable input
    st.session_state.thinking = False
    st.session_state.pending_prompt = None
    st.rerun()
