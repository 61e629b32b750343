from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    api_base_url: str = os.getenv("API_BASE_URL", "http://localhost:2022").rstrip("/")
    search_debounce_seconds: float = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))
    page_size: int = int(os.getenv("PAGE_SIZE", "20"))


settings = Settings()
