# -*- coding: utf-8 -*-
"""Shared setup: a throwaway data root and freshly imported app modules."""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Tuple

from fastapi.testclient import TestClient

PASSWORD = "password123"


def fresh_app(prefix: str) -> Tuple[Path, Any]:
    tmp = Path(tempfile.mkdtemp(prefix=prefix))
    data_root = tmp / "data"
    os.environ["NUTRIFLOW_DATA_ROOT"] = str(data_root)
    os.environ["NUTRIFLOW_DB_PATH"] = str(data_root / "nutriflow.db")
    os.environ["NUTRIFLOW_UPLOAD_ROOT"] = str(data_root / "uploads")
    os.environ["NUTRIFLOW_JWT_SECRET"] = "test-secret"
    os.environ["NUTRIFLOW_LOCALE"] = "pt-BR"
    os.environ.pop("NUTRIFLOW_MAX_UPLOAD_BYTES", None)

    # Ensure settings/app reflect the env vars above.
    for name in list(sys.modules.keys()):
        if name == "nutriflow" or name.startswith("nutriflow."):
            sys.modules.pop(name, None)

    from nutriflow.api import app  # noqa: WPS433 (import inside test for env control)

    return tmp, app


def cleanup(tmp: Path) -> None:
    shutil.rmtree(tmp, ignore_errors=True)


def register(app: Any, email: str, name: str = "Dra. Ana") -> Tuple[TestClient, Dict[str, Any]]:
    client = TestClient(app)
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": PASSWORD})
    if resp.status_code != 200:
        raise AssertionError(resp.text)
    return client, resp.json()


def new_patient(client: TestClient, name: str = "Maria Silva", **extra: Any) -> Dict[str, Any]:
    payload = {
        "name": name,
        "email": f"{name.split()[0].lower()}@example.com",
        "phone": "11999990000",
        "birthDate": "1990-04-12T00:00:00Z",
        **extra,
    }
    resp = client.post("/api/patients", json=payload)
    if resp.status_code != 200:
        raise AssertionError(resp.text)
    return resp.json()["patient"]
