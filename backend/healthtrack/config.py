import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


class Settings:
    API_BASE: str = os.getenv("API_BASE", "https://nearyala.lk")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
    # IANA zone used for day boundaries; empty means the host's local zone
    TIMEZONE: str = os.getenv("TIMEZONE", "")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8081")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __init__(self):
        if self.TIMEZONE:
            try:
                ZoneInfo(self.TIMEZONE)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Invalid TIMEZONE setting: {self.TIMEZONE!r}") from exc


settings = Settings()
