from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    app_name: str = "MealMaker Impact API"
    log_level: str = "INFO"

    # "memory" keeps everything in-process; "supabase" uses the tables below.
    impact_store: str = "memory"
    supabase_url: str = ""
    supabase_key: str = ""

    default_weekly_goal_kg: float = 2.0
    max_weekly_goal_kg: float = 100.0
    history_default_limit: int = 10
    history_max_limit: int = 50
    badge_thresholds: Optional[Dict[str, Dict[str, float]]] = None

    api_base_url: str = "http://localhost:8000/api/v1"
    client_write_timeout_s: float = 15.0
    client_read_timeout_s: float = 10.0
    client_upload_timeout_s: float = 30.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
