"""Lightweight persistence for user-configurable settings."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "objdump"
DEFAULT_CHUNK_SIZE = 1024
DEFAULT_VIEW_EXTENSION = ".objdump"
CONFIG_ENV_VAR = "OBJVIEW_CONFIG"
CONFIG_PATH = Path.home() / ".config" / "objview" / "settings.json"


@dataclass
class AppConfig:
    backend_executable: str = DEFAULT_BACKEND
    binary_sniff_chunk_size: int = DEFAULT_CHUNK_SIZE
    disable_on_remote_filesystems: bool = False
    view_extension: str = DEFAULT_VIEW_EXTENSION
    extra_arguments: list[str] = field(default_factory=list)
    ssh_executable: str = "ssh"
    last_opened: str = ""

    def __post_init__(self) -> None:
        chunk = self.binary_sniff_chunk_size
        if isinstance(chunk, bool) or not isinstance(chunk, int) or chunk <= 0:
            self.binary_sniff_chunk_size = DEFAULT_CHUNK_SIZE
        if not self.backend_executable:
            self.backend_executable = DEFAULT_BACKEND
        extension = self.view_extension or DEFAULT_VIEW_EXTENSION
        if not extension.startswith("."):
            extension = f".{extension}"
        self.view_extension = extension
        self.disable_on_remote_filesystems = bool(self.disable_on_remote_filesystems)
        self.extra_arguments = [str(arg) for arg in (self.extra_arguments or [])]


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else CONFIG_PATH


class ConfigManager:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_config_path()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> AppConfig:
        if not self.path.exists():
            return self._save_default()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("settings file %s is corrupt, restoring defaults", self.path)
            return self._save_default()
        if not isinstance(data, dict):
            return self._save_default()

        merged: dict[str, Any] = asdict(AppConfig())
        merged.update({k: v for k, v in data.items() if k in merged})
        return AppConfig(**merged)

    def save(self, config: AppConfig) -> None:
        self.path.write_text(json.dumps(asdict(config), indent=2), encoding="utf-8")

    def _save_default(self) -> AppConfig:
        config = AppConfig()
        self.save(config)
        return config
