# appointment.py
from dataclasses import dataclass
from typing import Dict

PLACEHOLDER = "-"

STATUSES = ("Pending", "Confirmed", "Completed", "Cancelled")


@dataclass(frozen=True)
class Appointment:
    id: str
    customer_name: str = PLACEHOLDER
    date: str = PLACEHOLDER
    time: str = PLACEHOLDER
    service_type: str = PLACEHOLDER
    status: str = "Confirmed"
    contact: str = PLACEHOLDER

    def __post_init__(self):
        if self.status not in STATUSES:
            raise ValueError(f"Invalid status: {self.status!r}")

    def to_dict(self) -> Dict[str, str]:
        # keys match the payload the assistant prompts are written against
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "date": self.date,
            "time": self.time,
            "serviceType": self.service_type,
            "status": self.status,
            "contact": self.contact,
        }


@dataclass(frozen=True)
class DashboardStats:
    total_appointments: int = 0
    today_appointments: int = 0
    pending_confirmations: int = 0
    popular_service: str = PLACEHOLDER
