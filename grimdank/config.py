import json
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(os.getenv("DATA_DIR", "data"))

DB_URL = os.getenv("DB_URL", f"sqlite:///./{DATA_DIR.as_posix()}/grimdank.db")
DEBUG = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

POINTS_CONFIG_PATH = Path(
    os.getenv(
        "POINTS_CONFIG_PATH",
        str(Path(__file__).resolve().parent / "rulesets" / "points.json"),
    )
)


def _load_json_list(env_key: str, default: list) -> list:
    raw_value = os.getenv(env_key)
    if not raw_value:
        return default
    try:
        parsed = json.loads(raw_value)
    except json.JSONDecodeError:
        return default
    return parsed if isinstance(parsed, list) else default


def extra_keywords(group: str) -> list[str]:
    values = _load_json_list(f"POINTS_EXTRA_KEYWORDS_{group.upper()}", [])
    return [str(value).strip().lower() for value in values if str(value).strip()]
