# File: toeic_splitter/core/config/settings.py

import os
import shutil
from pathlib import Path


class Settings:
    # --- Paths ---
    # toeic_splitter/core/config/settings.py -> config -> core -> toeic_splitter -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("TOEIC_DATA_DIR", str(BASE_DIR / "data")))
    OUTPUT_DIR: Path = Path(os.getenv("TOEIC_OUTPUT_DIR", str(BASE_DIR / "audio")))
    TEMP_DIR: Path = DATA_DIR / "tmp"

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "toeic_splitter")

    @property
    def DATABASE_URL(self) -> str:
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit

        # Local appliance default: one SQLite file next to the split outputs.
        if os.getenv("USE_SQLITE", "true").lower() == "true":
            return f"sqlite:///{self.DATA_DIR / 'toeic_splitter.db'}"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Silence Detection ---
    # TOEIC recordings carry background hiss, so -50dB is too strict.
    SILENCE_NOISE_DB: float = float(os.getenv("SILENCE_NOISE_DB", "-40"))
    SILENCE_MIN_DURATION: float = float(os.getenv("SILENCE_MIN_DURATION", "0.3"))

    # --- Cutting ---
    MAX_CUT_WORKERS: int = int(os.getenv("MAX_CUT_WORKERS", "8"))

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        self.TEMP_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
