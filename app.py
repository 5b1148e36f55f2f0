# app.py
# Three-step gift wizard: Context -> Clues -> Results.
# All transitions go through backend.wizard.GiftWizard; this file only renders
# the current step and forwards widget values.
#   - The analysis runs on a worker thread; its future lives in session state and
#     every run polls it, so the loading view survives reruns.
#   - Widget keys are cleared on reset so a new consultation starts empty.

import logging
import time
from concurrent.futures import ThreadPoolExecutor

import streamlit as st

from backend.config import BUDGET_MIN, BUDGET_MAX, BUDGET_STEP, RELATIONSHIP_OPTIONS
from backend.exceptions import ValidationError
from backend.images import to_data_uri
from backend.models import WizardStep
from backend.wizard import GiftWizard


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("gift_glance")

st.set_page_config(page_title="Gift-Glance", page_icon="🎁", layout="centered")

WIDGET_KEYS = ["quiz_activity", "quiz_complaint", "quiz_vibe", "notes"]
POLL_S = 0.25


@st.cache_resource
def _executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=4, thread_name_prefix="analysis")


def _wizard() -> GiftWizard:
    if "wizard" not in st.session_state:
        st.session_state["wizard"] = GiftWizard()
        st.session_state["last_upload_id"] = None
        st.session_state["uploader_nonce"] = 0
    return st.session_state["wizard"]


def _clear_widget_state() -> None:
    nonce = st.session_state.get("uploader_nonce", 0) + 1
    for k in WIDGET_KEYS:
        st.session_state.pop(k, None)
    # A fresh key is the only way to empty a file_uploader
    st.session_state["uploader_nonce"] = nonce
    st.session_state["last_upload_id"] = None


def _header() -> None:
    st.markdown("<h1 style='text-align:center'>Gift-Glance</h1>", unsafe_allow_html=True)
    st.markdown(
        "<p style='text-align:center; letter-spacing:0.2em'>UNWRAP THE PERFECT IDEA.</p>",
        unsafe_allow_html=True,
    )


def _render_context(wiz: GiftWizard) -> None:
    st.subheader("The Context")

    rel = st.selectbox(
        "Relationship",
        RELATIONSHIP_OPTIONS,
        index=RELATIONSHIP_OPTIONS.index(wiz.state.relationship),
    )
    wiz.set_relationship(rel)

    budget = st.slider(
        "Target Budget",
        min_value=BUDGET_MIN,
        max_value=BUDGET_MAX,
        step=BUDGET_STEP,
        value=wiz.state.budget,
    )
    wiz.set_budget(budget)
    st.markdown(f"**Up to {wiz.budget_label}**")

    if st.button("Next: Provide Clues →", use_container_width=True, type="primary"):
        wiz.advance()
        st.rerun()


def _ingest_upload(wiz: GiftWizard, uploaded) -> None:
    # file_uploader returns the same file on every rerun; only ingest new ones
    if uploaded is None or uploaded.file_id == st.session_state.get("last_upload_id"):
        return
    st.session_state["last_upload_id"] = uploaded.file_id
    data = uploaded.getvalue()
    try:
        token = wiz.select_image(uploaded.name, uploaded.type or "", data)
    except ValidationError:
        return
    wiz.complete_image(token, to_data_uri(uploaded.type, data))


def _render_photo_input(wiz: GiftWizard) -> None:
    uploaded = st.file_uploader(
        "Upload Photo: their everyday space, desk setup, or a personal photo.",
        type=None,
        key=f"uploader_{st.session_state['uploader_nonce']}",
    )
    _ingest_upload(wiz, uploaded)

    if wiz.state.image is not None and wiz.state.image.preview:
        st.image(wiz.state.image.data, use_container_width=True)


def _render_quiz_input(wiz: GiftWizard) -> None:
    q = wiz.state.quiz
    fields = [
        ("activity", "What activity consumes 4+ hours of their day?", "e.g. Coding, Gaming, Cooking"),
        ("complaint", "What specific problem or inconvenience do they face?", "e.g. Cold coffee, Back pain, Lost keys"),
        ("vibe", "Describe their aesthetic in 3 words", "e.g. Minimalist, Chaos, Cozy"),
    ]
    for name, label, placeholder in fields:
        key = f"quiz_{name}"
        if key not in st.session_state:
            st.session_state[key] = getattr(q, name)
        wiz.set_quiz_answer(name, st.text_input(label, key=key, placeholder=placeholder))


def _start_analysis(wiz: GiftWizard) -> None:
    st.session_state["analysis_future"] = _executor().submit(wiz.submit)


def _analysis_running(wiz: GiftWizard) -> bool:
    future = st.session_state.get("analysis_future")
    if future is None:
        return wiz.state.loading
    if not future.done():
        return True
    st.session_state.pop("analysis_future", None)
    # submit() never raises for analysis failures; anything else is a bug worth seeing
    future.result()
    return wiz.state.loading


def _render_loading(wiz: GiftWizard) -> None:
    st.markdown(
        f"<h3 style='text-align:center'>✨ {wiz.loading_message()}</h3>",
        unsafe_allow_html=True,
    )
    time.sleep(POLL_S)
    st.rerun()


def _render_clues(wiz: GiftWizard) -> None:
    if st.button("← Back"):
        wiz.back()
        st.rerun()

    labels = {"photo": "Visual", "quiz": "Profile"}
    choice = st.radio(
        "Mode",
        ["photo", "quiz"],
        index=0 if wiz.state.mode == "photo" else 1,
        format_func=labels.get,
        horizontal=True,
        label_visibility="collapsed",
    )
    if choice != wiz.state.mode:
        wiz.set_mode(choice)

    st.subheader("The Insight")

    if wiz.state.mode == "photo":
        _render_photo_input(wiz)
    else:
        _render_quiz_input(wiz)

    if "notes" not in st.session_state:
        st.session_state["notes"] = wiz.state.notes
    wiz.set_notes(st.text_input("Notes", key="notes", placeholder="+ Add notes (optional)", label_visibility="collapsed"))

    if wiz.state.error:
        st.error(wiz.state.error)

    if st.button("Find Perfect Gifts", use_container_width=True, type="primary"):
        _start_analysis(wiz)
        st.rerun()


def _render_results(wiz: GiftWizard) -> None:
    result = wiz.state.result
    st.caption("ANALYSIS COMPLETE")
    st.header(result.persona)

    for gift in result.gifts:
        with st.container(border=True):
            st.caption(gift.category.upper())
            st.subheader(gift.item_name)
            if gift.reasoning:
                st.write(gift.reasoning)
            st.link_button("View on Amazon", gift.amazon_link)

    if st.button("Start New Consultation", use_container_width=True):
        wiz.reset()
        _clear_widget_state()
        st.rerun()


wiz = _wizard()
_header()

if _analysis_running(wiz):
    _render_loading(wiz)

if wiz.state.step < WizardStep.RESULTS:
    st.caption(f"Step {int(wiz.state.step)} of 2")

if wiz.state.step == WizardStep.CONTEXT:
    _render_context(wiz)
elif wiz.state.step == WizardStep.CLUES:
    _render_clues(wiz)
elif wiz.state.result is not None:
    _render_results(wiz)
else:
    logger.warning("Results step reached without a result; returning to start")
    wiz.reset()
    st.rerun()
