"""Runtime configuration read from the environment (and a local .env file)."""
import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

# Keep local development easy: values in .env never override real env vars
env_path = Path(__file__).resolve().parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

SHOP_NAME: str = os.getenv("SHOP_NAME", "Léo Ótica")
DB_PATH: str = os.getenv("OTICA_DB_PATH", "data/otica.db")
SHOP_TZ = ZoneInfo(os.getenv("SHOP_TIMEZONE", "America/Sao_Paulo"))
RECALL_MONTHS: int = int(os.getenv("RECALL_MONTHS", "12"))
WHATSAPP_COUNTRY_CODE: str = os.getenv("WHATSAPP_COUNTRY_CODE", "55")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


def configure_logging() -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
