# app.py
import asyncio

import streamlit as st

# Backend
from backend.config import load_settings
from backend.db import init_db, load_source_url
from backend.errors import ConfigurationError
from backend.llm import ScheduleAssistant, list_local_models
from backend.log import configure_logging, get_logger
from backend.services import refresh, run_analysis, run_chat, today_in
from backend.state import DashboardState


# ============================
# INICIALIZACIÓN
# ============================
settings = load_settings()
configure_logging(settings.log_level)
logger = get_logger("app")
init_db(settings.db_path)

STATUS_BADGES = {
    "Confirmed": "🟢",
    "Pending": "🟡",
    "Completed": "🔵",
    "Cancelled": "⚪",
}

# Streamlit setup
st.set_page_config(page_title="Service Dash", page_icon="🗓️", layout="wide")


# Estado global
if "dashboard" not in st.session_state:
    st.session_state.dashboard = DashboardState(
        source_url=load_source_url(settings.default_csv_url)
    )
    # Carga inicial al abrir la app
    refresh(st.session_state.dashboard, timeout=settings.fetch_timeout)

state = st.session_state.dashboard


# ============================
# SIDEBAR
# ============================
with st.sidebar:
    st.title("🗓️ Service Dash")

    view = st.radio("Vista", ["📋 Appointments", "⚙️ Settings"], label_visibility="collapsed", key="view")

    st.caption("CUSTOMER ENTRY")
    if settings.form_url:
        st.link_button("🔗 Open customer form", settings.form_url)
    else:
        st.info("Set GOOGLE_FORM_URL to share the booking form.")

    # ------------------- LLM -----------------------
    st.subheader("🧠 LLM provider")
    provider = st.radio("LLM provider", ["Ollama (local)", "Groq (cloud)"],
                        index=1 if settings.llm_provider == "groq" else 0)

    api_key = None
    if provider.startswith("Ollama"):
        local_models = list_local_models()
        if local_models:
            model_name = st.selectbox("Installed Ollama models", local_models, index=0)
            st.caption("💡 Use 'ollama pull <model>' to download more models.")
            if st.button("🔄 Refresh models"):
                st.rerun()
        else:
            st.warning("Could not list Ollama models.")
            model_name = st.text_input("Ollama model", value=settings.model_name)
    else:
        model_name = st.text_input("Groq model", value=settings.model_name)
        api_key = st.text_input("GROQ_API_KEY", type="password", value=settings.groq_api_key)

    assistant = None
    try:
        assistant = ScheduleAssistant(
            provider=provider.split()[0].lower(),
            model_name=model_name,
            api_key=api_key,
            language=settings.language,
        )
    except ConfigurationError as e:
        logger.warning("assistant_unavailable", error=str(e))
        st.warning(f"⚠️ {e}")

    # ------------------- ANÁLISIS IA -----------------------
    st.markdown("---")
    st.subheader("✨ AI schedule analysis")
    st.caption("Checks busy periods and conflicts in the live sheet data.")
    if st.button(
        "Processing…" if state.is_analyzing else "Analyze now",
        disabled=state.is_analyzing or not state.appointments or assistant is None,
        use_container_width=True,
    ):
        with st.spinner("Analyzing schedule…"):
            asyncio.run(run_analysis(state, assistant))


# ============================
# AJUSTES
# ============================
def render_settings():
    st.header("Connection settings")
    st.write(
        "Data is read live from your Google Sheet. Make sure the sheet is "
        "published to the web as CSV (File → Share → Publish to web)."
    )

    url = st.text_input("Google Sheets CSV URL", value=state.source_url)

    if state.error:
        st.error(f"⚠️ {state.error}")

    col_save, col_reset = st.columns((3, 1))
    with col_save:
        if st.button(
            "Checking…" if state.is_syncing else "Save and refresh",
            disabled=state.is_syncing or not url.strip(),
            use_container_width=True,
        ):
            state.source_url = url.strip()
            with st.spinner("Fetching sheet…"):
                refresh(state, timeout=settings.fetch_timeout)
            st.rerun()
    with col_reset:
        if st.button("Restore default", use_container_width=True):
            state.source_url = settings.default_csv_url
            with st.spinner("Fetching sheet…"):
                refresh(state, timeout=settings.fetch_timeout)
            st.rerun()

    st.markdown("---")
    st.subheader("Current connection")
    st.markdown(f"- Form link: {settings.form_url or '-'}")
    st.markdown(f"- Records found: {len(state.appointments)}")
    st.markdown("- Data is fetched again every time you press Refresh")


# ============================
# CITAS
# ============================
def render_appointment(a):
    with st.container(border=True):
        st.markdown(f"**{a.customer_name}** · {STATUS_BADGES.get(a.status, '⚪')} {a.status}")
        st.caption(a.contact)
        st.markdown(f"📅 {a.date}  \n🕒 {a.time}")
        st.markdown(f"**Service:** {a.service_type}")


def render_appointments():
    head, search_col, refresh_col = st.columns((5, 3, 2))
    with head:
        st.header("Customer appointments")
        dot = "🟢" if state.appointments else "⚪"
        st.caption(f"{dot} Live data from Google Sheets")
    with search_col:
        st.text_input("Search customer or service", key="search_term")
        state.search_term = st.session_state.search_term
    with refresh_col:
        if st.button(
            "Fetching…" if state.is_syncing else "🔄 Refresh",
            disabled=state.is_syncing or not state.source_url,
            use_container_width=True,
        ):
            with st.spinner("Fetching sheet…"):
                refresh(state, timeout=settings.fetch_timeout)
            st.rerun()

    if state.error:
        st.error(f"⚠️ {state.error}")

    stats = state.stats(today_in(settings.timezone))
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total", stats.total_appointments)
    c2.metric("Today", stats.today_appointments)
    c3.metric("Pending", stats.pending_confirmations)
    c4.metric("Popular service", stats.popular_service)

    # Resultado del análisis IA
    if state.insight:
        with st.container(border=True):
            title, close = st.columns((9, 1))
            title.subheader("✨ Schedule analysis")
            if close.button("✖", key="close-insight"):
                state.insight = ""
                st.rerun()
            st.markdown(state.insight)

    st.subheader(f"From Google Form ({len(state.appointments)})")
    rows = state.filtered()
    if not rows:
        form = f"[Google Form]({settings.form_url})" if settings.form_url else "the Google Form"
        st.info(f"No appointments yet. When customers fill in {form}, they will show up here.")
    else:
        cols = st.columns(3)
        for i, a in enumerate(rows):
            with cols[i % 3]:
                render_appointment(a)

    # ------------------- CHAT -----------------------
    st.markdown("---")
    st.subheader("✨ Smart assistant")
    st.caption("Query the real data directly")
    with st.form("chat", clear_on_submit=True):
        query = st.text_input("Ask about your schedule", placeholder="Who is booked tomorrow?")
        submitted = st.form_submit_button("Ask", disabled=assistant is None or not state.appointments)
    if submitted and query.strip():
        with st.spinner("Processing real data…"):
            asyncio.run(run_chat(state, assistant, query))
    if state.chat_response:
        with st.chat_message("assistant"):
            st.markdown(state.chat_response)


# ============================
# INTERFAZ PRINCIPAL
# ============================
if view.startswith("⚙️"):
    render_settings()
else:
    render_appointments()
