"""
Client-side credential storage.

Credentials live in plaintext YAML under ~/.thoughts-portal (or
$THOUGHTS_PORTAL_HOME). The file is chmod 600 but anyone with access to the
account can read it.
"""
import os
from pathlib import Path
from typing import Optional, Tuple

import yaml

PLAINTEXT_WARNING = "[!] Credentials are stored in plaintext at {path}"


def portal_home() -> Path:
    override = os.environ.get("THOUGHTS_PORTAL_HOME")
    return Path(override) if override else Path.home() / ".thoughts-portal"


def credentials_path() -> Path:
    return portal_home() / "credentials.yaml"


def load_credentials() -> Optional[Tuple[str, str]]:
    path = credentials_path()
    if not path.exists():
        return None
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    username = data.get("username") or ""
    password = data.get("password") or ""
    if not username or not password:
        return None
    return username, password


def save_credentials(username: str, password: str) -> Path:
    path = credentials_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"username": username, "password": password}, f)
    path.chmod(0o600)
    return path


def clear_credentials() -> bool:
    path = credentials_path()
    if path.exists():
        path.unlink()
        return True
    return False
