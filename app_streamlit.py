import streamlit as st

import config
from credentials import (
    CredentialMode,
    HostKeySelector,
    KeyState,
    handle_prediction_error,
    needs_key,
    resolve_api_key,
)
from errors import PredictionError, SymptomInputError
from logging_utils import setup_logging
from pydantic_models import PredictionRequest
from result_view import NO_PREDICTIONS_MESSAGE, confidence_chart, results_frame
from symptom_client import fetch_symptoms, request_prediction
from symptoms import toggle_symptom

BILLING_DOCS = "https://ai.google.dev/gemini-api/docs/billing"

setup_logging(config.LOG_LEVEL)

st.set_page_config(page_title="Disease Predictor", page_icon="🩺", layout="wide")

ss = st.session_state
ss.setdefault("selected_symptoms", [])
ss.setdefault("other_symptoms", "")
ss.setdefault("is_loading", False)
ss.setdefault("prediction", None)
ss.setdefault("error", None)
ss.setdefault("key_error", None)

mode = CredentialMode.parse(config.CREDENTIAL_MODE)
key_state = KeyState(ss)
host_selector = HostKeySelector.from_env(config.host_api_keys())


@st.cache_data(ttl=600)
def load_symptoms():
    return fetch_symptoms()


@st.dialog("Select API key")
def select_key_dialog():
    st.write("Choose one of the keys provided by this environment. It is used only for this session.")
    label = st.radio("Available keys", host_selector.labels(), index=None)
    if st.button("Use this key", disabled=label is None, type="primary"):
        host_selector.select(key_state, label)
        ss.key_error = None
        ss.error = None
        st.rerun()


def host_key_gate() -> bool:
    if host_selector.has_selected_key(key_state):
        return True
    st.title("🔑 API Key Required")
    st.write("To use this application, you need to select a Google Gemini API key. "
             "Your key is used only for this session and is not stored.")
    if ss.key_error:
        st.error(ss.key_error)
    if not host_selector.is_available():
        st.error("No API keys are offered by this environment. Set HOST_API_KEYS and restart.")
        return False
    if st.button("Select API Key", type="primary"):
        select_key_dialog()
    st.caption(f"For information on billing, please visit the [official documentation]({BILLING_DOCS}).")
    return False


def manual_key_sidebar():
    st.sidebar.header("🔑 API Key")
    st.sidebar.caption("Held only for this session. Never stored.")
    if key_state.ready:
        st.sidebar.success("API key set for this session.")
        if st.sidebar.button("Clear key"):
            key_state.invalidate()
            st.rerun()
        return
    if ss.key_error:
        st.sidebar.error(ss.key_error)
    entered = st.sidebar.text_input("Gemini API key", key="manual_key_input", type="password")
    if st.sidebar.button("Use key", key="use_key", disabled=not entered.strip()):
        key_state.set_key(entered)
        ss.key_error = None
        ss.error = None
        st.rerun()


def on_toggle(symptom: str):
    ss.selected_symptoms = toggle_symptom(ss.selected_symptoms, symptom)


def on_submit():
    req = PredictionRequest(symptoms=ss.selected_symptoms, other_symptoms=ss.other_symptoms)
    ss.prediction = None
    if not req.has_input():
        ss.error = SymptomInputError().message
        return
    ss.error = None
    ss.is_loading = True


def run_prediction():
    try:
        ss.prediction = request_prediction(
            ss.selected_symptoms,
            ss.other_symptoms,
            api_key=resolve_api_key(mode, key_state),
        )
    except PredictionError as e:
        ss.error = e.message
        if handle_prediction_error(key_state, e):
            ss.key_error = e.message
    finally:
        ss.is_loading = False


def show_result(result):
    if result.is_empty:
        st.info(NO_PREDICTIONS_MESSAGE)
        return
    top = result.top
    st.subheader("✅ Analysis Complete")
    with st.container(border=True):
        st.caption("Most Likely Condition")
        st.markdown(f"### {top.condition}")
        st.markdown(f"**{top.confidence:.0f}% Confidence**")
        st.markdown("**Description**")
        st.write(top.description)
        st.markdown("**Recommended Next Steps**")
        st.write(top.next_steps)
    st.plotly_chart(confidence_chart(result), use_container_width=True)
    st.dataframe(results_frame(result), hide_index=True, use_container_width=True)


if mode is CredentialMode.HOST and not host_key_gate():
    st.stop()
if mode is CredentialMode.MANUAL:
    manual_key_sidebar()

st.title("🩺 Disease Predictor")
st.write("Enter your symptoms and let our tool suggest potential conditions.")
st.warning("This tool is for informational purposes only and does not provide medical advice. "
           "Always consult a qualified healthcare professional.")

left, right = st.columns(2, gap="large")

with left:
    st.subheader("1. Select Your Symptoms")
    chip_cols = st.columns(3)
    for i, symptom in enumerate(load_symptoms()):
        chip_cols[i % 3].button(
            symptom,
            key=f"chip_{symptom}",
            type="primary" if symptom in ss.selected_symptoms else "secondary",
            on_click=on_toggle,
            args=(symptom,),
            use_container_width=True,
        )

    st.subheader("2. Describe Other Symptoms")
    st.text_area(
        "Other symptoms",
        key="other_symptoms",
        placeholder="e.g., 'Mild headache for 2 days, feeling tired...'",
        label_visibility="collapsed",
    )

    blocked = ss.is_loading or needs_key(mode, key_state)
    st.button("Get Prediction", key="submit", type="primary", disabled=blocked,
              on_click=on_submit, use_container_width=True)
    if needs_key(mode, key_state):
        st.caption("Set an API key to enable predictions.")

with right:
    if ss.is_loading:
        with st.spinner("Analyzing symptoms... This may take a moment."):
            run_prediction()
        st.rerun()
    if ss.error:
        st.error(ss.error)
    elif ss.prediction is not None:
        show_result(ss.prediction)
    else:
        st.info("Your results will appear here.")

st.caption("This tool does not provide medical advice. Always consult with a healthcare professional.")
