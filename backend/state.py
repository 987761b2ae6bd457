# state.py
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from backend.services import filter_appointments, dashboard_stats
from models.appointment import Appointment, DashboardStats


@dataclass
class DashboardState:
    """
    Estado de la sesión del dashboard (vive en st.session_state).

    Cada operación escribe solo su parte y la reemplaza entera:
    - ingesta: appointments, error, is_syncing, source_url
    - búsqueda: search_term
    - IA: insight, is_analyzing, chat_response
    """
    source_url: str = ""
    appointments: List[Appointment] = field(default_factory=list)
    search_term: str = ""
    is_syncing: bool = False
    error: Optional[str] = None
    insight: str = ""
    is_analyzing: bool = False
    chat_response: str = ""

    def filtered(self) -> List[Appointment]:
        return filter_appointments(self.appointments, self.search_term)

    def stats(self, today: date) -> DashboardStats:
        return dashboard_stats(self.appointments, today)
