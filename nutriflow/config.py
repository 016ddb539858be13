from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the NutriFlow backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("NUTRIFLOW_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("NUTRIFLOW_DB_PATH") or (self.data_root / "nutriflow.db")
        ).expanduser()
        self.upload_root: Path = Path(
            os.environ.get("NUTRIFLOW_UPLOAD_ROOT") or (self.data_root / "uploads")
        ).expanduser()
        # In production you MUST set NUTRIFLOW_JWT_SECRET. The dev secret keeps local demos easy.
        self.jwt_secret: str = os.environ.get("NUTRIFLOW_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("NUTRIFLOW_TOKEN_TTL_DAYS") or "7")
        self.cookie_secure: bool = (os.environ.get("NUTRIFLOW_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}
        # Avatar/logo limit: exactly 5 MB is accepted, one byte more is rejected.
        self.max_upload_bytes: int = int(
            os.environ.get("NUTRIFLOW_MAX_UPLOAD_BYTES") or str(5 * 1024 * 1024)
        )
        self.locale: str = os.environ.get("NUTRIFLOW_LOCALE") or "pt-BR"
        self.login_path: str = os.environ.get("NUTRIFLOW_LOGIN_PATH") or "/login"
        self.host: str = os.environ.get("NUTRIFLOW_HOST") or os.environ.get("HOST") or "127.0.0.1"
        self.port_raw: str = os.environ.get("NUTRIFLOW_PORT") or os.environ.get("PORT") or "8000"

        cors = os.environ.get("NUTRIFLOW_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
