from dotenv import load_dotenv
from pydantic import BaseModel, Field
import os

load_dotenv()

def _to_bool(v: str | None, default: bool = False) -> bool:
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}

def _to_int(v: str | None, default: int) -> int:
    if v is None or not v.strip():
        return default
    return int(v.strip())

def _to_float(v: str | None, default: float) -> float:
    if v is None or not v.strip():
        return default
    return float(v.strip())


class Settings(BaseModel):
    op_path: str = Field(default="op", min_length=1)

    workers: int = Field(default=1, ge=1)
    timeout_seconds: float = Field(default=120.0, gt=0)
    id_field: str = Field(default="id", min_length=1)
    sort_by_id: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_file: str = Field(default="")


_settings: Settings | None = None

def load_settings() -> Settings:
    return Settings(
        op_path=os.getenv("OP_PATH") or "op",
        workers=_to_int(os.getenv("OP_EXPORT_WORKERS"), 1),
        timeout_seconds=_to_float(os.getenv("OP_EXPORT_TIMEOUT_SECONDS"), 120.0),
        id_field=os.getenv("OP_EXPORT_ID_FIELD") or "id",
        sort_by_id=_to_bool(os.getenv("OP_EXPORT_SORT_BY_ID"), False),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE", ""),
    )

def get_settings() -> Settings:
    global _settings
    if _settings is not None:
        return _settings

    _settings = load_settings()
    return _settings
