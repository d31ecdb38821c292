import os

# --- Configurações ---
def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default

DB_HOST = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT = _int_env("POSTGRES_PORT", 5432)
DB_NAME = os.getenv("POSTGRES_DB", "courier_risk")
DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "")
DB_URL = os.getenv("DATABASE_URL") or (
    f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)
TABLE_PREFIX = os.getenv("TABLE_PREFIX", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

REFRESH_INTERVAL_HOURS = _int_env("REFRESH_INTERVAL_HOURS", 12)
DASHBOARD_LIMIT = _int_env("DASHBOARD_LIMIT", 5)

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = _int_env("API_PORT", 8000)
