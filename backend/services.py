# backend/services.py
import sqlite3
import time
from collections import Counter
from datetime import date, datetime
from typing import List, Optional

import pytz
import requests
from dateutil import parser as dtparse

from backend.db import save_source_url
from backend.errors import IngestionError
from backend.log import get_logger
from backend.parsing import parse_appointments
from models.appointment import Appointment, DashboardStats, PLACEHOLDER

logger = get_logger(__name__)

UNREACHABLE_MESSAGE = (
    "Could not reach the data source. Check that the sheet is published to the web as CSV."
)
ANALYSIS_FAILED_MESSAGE = "Unable to analyze the schedule right now."
ANALYSIS_EMPTY_MESSAGE = "Not enough data to analyze."
CHAT_FAILED_MESSAGE = "Sorry, something went wrong while processing your question."


# ============================
# INGESTA
# ============================
def cache_busting_url(url: str, now: Optional[float] = None) -> str:
    """Añade ?t=<ms> (o &t=<ms>) para saltarse la caché de la hoja publicada."""
    millis = int((time.time() if now is None else now) * 1000)
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}t={millis}"


def fetch_appointments(url: str, timeout: Optional[float] = 30.0) -> List[Appointment]:
    if not url:
        raise IngestionError("No data source configured")

    try:
        response = requests.get(cache_busting_url(url), timeout=timeout)
    except requests.RequestException as e:
        logger.warning("sheet_request_failed", url=url, error=str(e))
        raise IngestionError(UNREACHABLE_MESSAGE) from e

    if not response.ok:
        logger.warning("sheet_bad_status", url=url, status=response.status_code)
        raise IngestionError(UNREACHABLE_MESSAGE)

    return parse_appointments(response.text)


def refresh(state, timeout: Optional[float] = 30.0) -> bool:
    """
    Un ciclo de ingesta sobre el estado del dashboard.
    Devuelve True si las citas se reemplazaron.
    """
    url = state.source_url
    if not url:
        return False
    if state.is_syncing:
        logger.info("refresh_skipped", reason="already_syncing")
        return False

    state.is_syncing = True
    state.error = None
    logger.info("refresh_started", url=url)
    try:
        appointments = fetch_appointments(url, timeout=timeout)
    except IngestionError as e:
        state.error = f"Failed to load data: {e}"
        logger.error("refresh_failed", url=url, error=str(e))
        return False
    except Exception as e:
        # p.ej. un CSV que no se puede interpretar
        state.error = f"Failed to load data: {e}"
        logger.exception("refresh_failed", url=url, error=str(e))
        return False
    finally:
        state.is_syncing = False

    state.appointments = appointments
    try:
        save_source_url(url)
    except sqlite3.Error as e:
        state.error = f"Data loaded, but could not save the source URL: {e}"
        logger.error("source_url_not_saved", url=url, error=str(e))
    logger.info("refresh_succeeded", url=url, count=len(appointments))
    return True


# ============================
# VISTA
# ============================
def filter_appointments(appointments: List[Appointment], term: str) -> List[Appointment]:
    q = (term or "").lower()
    return [
        a for a in appointments
        if q in a.customer_name.lower() or q in a.service_type.lower()
    ]


def today_in(tz_name: str) -> date:
    return datetime.now(pytz.timezone(tz_name)).date()


def _parse_date(value: str) -> Optional[date]:
    if not value or value == PLACEHOLDER:
        return None
    try:
        return dtparse.parse(value).date()
    except (ValueError, OverflowError):
        return None


def dashboard_stats(appointments: List[Appointment], today: date) -> DashboardStats:
    services = Counter(a.service_type for a in appointments if a.service_type != PLACEHOLDER)
    # most_common conserva el orden de aparición en los empates
    popular = services.most_common(1)[0][0] if services else PLACEHOLDER

    return DashboardStats(
        total_appointments=len(appointments),
        today_appointments=sum(1 for a in appointments if _parse_date(a.date) == today),
        pending_confirmations=sum(1 for a in appointments if a.status == "Pending"),
        popular_service=popular,
    )


# ============================
# ASISTENTE IA
# ============================
async def run_analysis(state, assistant) -> None:
    if not state.appointments:
        return

    state.is_analyzing = True
    try:
        result = await assistant.summarize(state.appointments)
    finally:
        state.is_analyzing = False

    if result.ok:
        state.insight = result.text or ANALYSIS_EMPTY_MESSAGE
    else:
        state.insight = ANALYSIS_FAILED_MESSAGE


async def run_chat(state, assistant, query: str) -> None:
    if not (query or "").strip() or not state.appointments:
        return

    result = await assistant.answer(query, state.appointments)
    if result.ok:
        state.chat_response = result.text
    else:
        state.chat_response = CHAT_FAILED_MESSAGE
