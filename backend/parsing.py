# parsing.py
import re
from typing import List, Optional

from models.appointment import Appointment, PLACEHOLDER

# Coma que NO está dentro de un campo entre comillas:
# detrás quedan un número par de comillas hasta el final de la línea
FIELD_SPLIT_RE = re.compile(r',(?=(?:(?:[^"]*"){2})*[^"]*$)')
EDGE_QUOTE_RE = re.compile(r'^"|"$')
LINE_SPLIT_RE = re.compile(r"\r?\n")

# Orden de columnas de la hoja de respuestas del formulario
COL_TIMESTAMP = 0
COL_NAME = 1
COL_DATE = 2
COL_TIME = 3
COL_SERVICE = 4
COL_CONTACT = 5


def split_fields(line: str) -> List[str]:
    return FIELD_SPLIT_RE.split(line)


def clean_field(value: Optional[str]) -> str:
    """Quita una comilla inicial/final y espacios; vacío -> placeholder."""
    if value is None:
        return PLACEHOLDER
    return EDGE_QUOTE_RE.sub("", value).strip() or PLACEHOLDER


def _column(cols: List[str], index: int) -> str:
    return clean_field(cols[index] if index < len(cols) else None)


def parse_row(line: str, index: int) -> Appointment:
    cols = split_fields(line)
    return Appointment(
        id=f"row-{index}-{_column(cols, COL_TIMESTAMP)}",
        customer_name=_column(cols, COL_NAME),
        date=_column(cols, COL_DATE),
        time=_column(cols, COL_TIME),
        service_type=_column(cols, COL_SERVICE),
        status="Confirmed",
        contact=_column(cols, COL_CONTACT),
    )


def parse_appointments(text: str) -> List[Appointment]:
    """
    Convierte el CSV publicado de la hoja en citas.

    La primera línea es la cabecera. Las filas sin nombre se descartan y el
    resultado queda invertido: la última fila de la hoja (la más reciente)
    va primero.
    """
    lines = [line for line in LINE_SPLIT_RE.split(text or "") if line.strip() != ""]
    if len(lines) <= 1:
        return []

    parsed = [parse_row(line, index) for index, line in enumerate(lines[1:])]
    parsed = [a for a in parsed if a.customer_name != PLACEHOLDER]
    parsed.reverse()
    return parsed
