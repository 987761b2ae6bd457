# backend/db.py
import sqlite3
from typing import Optional, Dict

DB_PATH = "dashboard.db"

SOURCE_URL_KEY = "sheet_csv_url"


def get_connection():
    return sqlite3.connect(DB_PATH, detect_types=sqlite3.PARSE_DECLTYPES)


def init_db(path: Optional[str] = None):
    global DB_PATH
    if path:
        DB_PATH = path

    con = get_connection()
    cur = con.cursor()

    # Preferencias persistentes (clave/valor)
    cur.execute('''
    CREATE TABLE IF NOT EXISTS preferencias (
        clave TEXT PRIMARY KEY,
        valor TEXT,
        actualizado_en TEXT
    )
    ''')

    con.commit()
    con.close()


def execute_query(query: str, params: tuple = ()):
    con = get_connection()
    cur = con.cursor()
    cur.execute(query, params)
    con.commit()
    lastrowid = cur.lastrowid
    con.close()
    return lastrowid


def query_one(query: str, params: tuple = ()) -> Optional[Dict]:
    con = get_connection()
    con.row_factory = sqlite3.Row
    cur = con.cursor()
    cur.execute(query, params)
    row = cur.fetchone()
    con.close()
    return dict(row) if row else None


def get_preference(clave: str, default: Optional[str] = None) -> Optional[str]:
    row = query_one("SELECT valor FROM preferencias WHERE clave = ?", (clave,))
    if row is None or row["valor"] is None:
        return default
    return row["valor"]


def set_preference(clave: str, valor: str):
    """
    Inserta o actualiza una preferencia.
    """
    execute_query("""
        INSERT INTO preferencias (clave, valor, actualizado_en)
        VALUES (?, ?, datetime('now'))
        ON CONFLICT(clave) DO UPDATE SET
            valor = excluded.valor,
            actualizado_en = excluded.actualizado_en
    """, (clave, valor))


def load_source_url(default: str = "") -> str:
    """URL del CSV guardada en la última sesión, o `default`."""
    return get_preference(SOURCE_URL_KEY) or default


def save_source_url(url: str):
    set_preference(SOURCE_URL_KEY, url)
