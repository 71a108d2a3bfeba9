# portal/lambdas/thoughts_api/config.py
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _log_level(value: str) -> str:
    """Known level names pass through upper-cased; anything else means INFO."""
    name = value.strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


@dataclass(frozen=True)
class Settings:
    table_name: str = "thoughts"
    auth_username: str = ""
    auth_password: str = ""
    auth_realm: str = "Thoughts Portal"
    notify_from: str = ""
    notify_to: str = ""
    aws_region: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            table_name=env.get("THOUGHTS_TABLE", "thoughts"),
            auth_username=env.get("AUTH_USERNAME", ""),
            auth_password=env.get("AUTH_PASSWORD", ""),
            auth_realm=env.get("AUTH_REALM", "Thoughts Portal"),
            notify_from=env.get("NOTIFY_FROM_EMAIL", ""),
            notify_to=env.get("NOTIFY_TO_EMAIL", ""),
            aws_region=env.get("AWS_REGION") or None,
            log_level=_log_level(env.get("LOG_LEVEL", "INFO")),
        )

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.notify_from and self.notify_to)
