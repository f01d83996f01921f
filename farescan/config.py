"""Configuration utilities.

Central place to load environment driven settings (render thresholds, output paths, email credentials).
Avoids scattering os.getenv calls around the codebase.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env once on module import
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class Settings:
    base_url: str = os.getenv("FARESCAN_BASE_URL", "https://www.google.com/travel/flights")
    min_content_lines: int = int(os.getenv("MIN_CONTENT_LINES", "100"))
    render_timeout_ms: int = int(os.getenv("RENDER_TIMEOUT_MS", str(30 * 1000)))
    render_max_attempts: int = int(os.getenv("RENDER_MAX_ATTEMPTS", "10"))
    render_headless: bool = _env_flag("RENDER_HEADLESS", "true")
    fetch_pause: float = float(os.getenv("FETCH_PAUSE", "2"))
    data_pickle: Path = Path(os.getenv("DATA_PICKLE", "flight_results.pkl"))
    output_html: Path = Path(os.getenv("OUTPUT_HTML", "price_report.html"))
    output_csv: Path = Path(os.getenv("OUTPUT_CSV", "flights.csv"))
    src_mail: str | None = os.getenv("SRC_MAIL")
    src_pwd: str | None = os.getenv("SRC_PWD")
    dst_mail: str | None = os.getenv("DST_MAIL")

    def email_configured(self) -> bool:
        return all([self.src_mail, self.src_pwd, self.dst_mail])


settings = Settings()
