# streamlit_demo.py
import streamlit as st

from adstudio.clients import AudioClient, ScriptClient, VoiceCatalogClient
from adstudio.config import BACKEND_URL, CLIP_DIR
from adstudio.flow import (
    AdBuilderFlow,
    can_generate_audio,
    can_generate_script,
    can_shorten,
    is_overflowing,
    status_line,
)
from adstudio.services.clip_store import ClipStore
from adstudio.services.duration import TARGET_DURATIONS

# =========================
# PAGE CONFIG
# =========================
st.set_page_config(
    page_title="Radio Ad Studio",
    page_icon="🎙",
    layout="centered"
)

# =========================
# BACKEND CONFIG
# =========================
try:
    API_HOST = st.secrets.get("BACKEND_URL") or BACKEND_URL
except Exception:  # no secrets.toml
    API_HOST = BACKEND_URL


@st.cache_resource
def get_clip_store():
    # one sweeper per server process, sweeping every 6 hours
    return ClipStore(clip_dir=CLIP_DIR, sweep_interval_seconds=6 * 60 * 60)


def get_flow() -> AdBuilderFlow:
    if "flow" not in st.session_state:
        flow = AdBuilderFlow(
            script_client=ScriptClient(API_HOST),
            voice_client=VoiceCatalogClient(API_HOST),
            audio_client=AudioClient(API_HOST),
            clip_store=get_clip_store(),
        )
        flow.load_voices()
        st.session_state.flow = flow
    return st.session_state.flow


flow = get_flow()

# =========================
# HEADER
# =========================
st.markdown(
    "<h2 style='text-align:center;'>🎙 AI Radio Ad Generator</h2>",
    unsafe_allow_html=True
)

# =========================
# SCRIPT FORM
# =========================
with st.form("script_form"):
    target = st.selectbox(
        "Ad Duration",
        TARGET_DURATIONS,
        index=TARGET_DURATIONS.index(flow.state.target_seconds),
        format_func=lambda s: f"{s} seconds",
    )
    brand_name = st.text_input("Brand Name", value=flow.state.brand_name, placeholder="Enter your brand name")
    description = st.text_area(
        "Description",
        value=flow.state.description,
        placeholder="Describe your brand and what you want to promote",
    )
    submitted = st.form_submit_button(
        "Generating..." if flow.state.script_busy else "Generate Script",
        disabled=not can_generate_script(flow.state),
        use_container_width=True,
    )

if target != flow.state.target_seconds:
    flow.set_target(target)
if (brand_name, description) != (flow.state.brand_name, flow.state.description):
    flow.set_form(brand_name, description)

if submitted:
    with st.spinner("Writing your script..."):
        flow.generate_script()

# =========================
# NOTICES
# =========================
notice = flow.state.notice
if notice:
    show = {"success": st.success, "warning": st.warning}.get(notice.level, st.error)
    show(f"**{notice.title}**: {notice.text}")

# =========================
# SCRIPT + AUDIO
# =========================
if flow.state.script:
    st.divider()
    edited = st.text_area("Generated Script", value=flow.state.script, height=180)
    if edited != flow.state.script:
        flow.edit_script(edited)

    line = status_line(flow.state)
    if line:
        if is_overflowing(flow.state):
            st.error(f"⚠️ {line}")
        else:
            st.success(f"✓ {line}")

    if can_shorten(flow.state) and st.button("✂️ Shorten Script"):
        with st.spinner("Tightening the script..."):
            flow.shorten_script()
        st.rerun()

    voices = {v.voice_id: v.label for v in flow.state.voices}

    def on_voice_change():
        flow.select_voice(st.session_state.voice_select)
        # a rejected voice is cleared, so the picker has to follow
        st.session_state.voice_select = flow.state.selected_voice

    st.selectbox(
        "Select Voice",
        [""] + list(voices),
        key="voice_select",
        on_change=on_voice_change,
        format_func=lambda v: voices.get(v, "No voices available" if not voices else "Choose a voice"),
    )

    if flow.state.sample_path:
        st.caption("Voice Sample")
        st.audio(flow.state.sample_path, format="audio/mpeg")

    if st.button(
        "Generating Audio..." if flow.state.audio_busy else "Generate Audio",
        disabled=not can_generate_audio(flow.state),
        type="primary",
        use_container_width=True,
    ):
        with st.spinner("Rendering your ad..."):
            flow.generate_audio()
        st.rerun()

    if flow.state.audio_path:
        st.markdown("### Generated Audio Ad")
        st.audio(flow.state.audio_path, format="audio/mpeg")

st.caption("© Radio Ad Studio")
