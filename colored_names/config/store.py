"""Configuration Store

YAML file storage for the palette document. The normalized document is the
only durable artifact; assignments and teams are rebuilt every session.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from colored_names.config.palette import ConfigError, default_document
from colored_names.log_config import log_debug, log_info


def serialize_document(document: Dict[str, Any]) -> str:
    """Dump a document to YAML text. Key order is preserved."""
    return yaml.safe_dump(
        document,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


class ConfigStore:
    """File-backed store for the palette document."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Any:
        """Load the raw document.

        Returns:
            The parsed YAML value, ``None`` for an empty file

        Raises:
            ConfigError: If the file cannot be read or is not valid YAML
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {self.path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Configuration file {self.path} is not valid YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {self.path}: {e}") from e

    def save_default(self) -> bool:
        """Write the default document if no file exists yet.

        Returns:
            True if the file was created
        """
        if self.exists():
            return False
        self._write(serialize_document(default_document()))
        log_info(f"[ConfigStore] Wrote default configuration to {self.path}")
        return True

    def persist(self, document: Dict[str, Any]) -> bool:
        """Write a normalized document back, skipping identical content.

        Args:
            document: A document produced by ``normalize_document``

        Returns:
            True if the file content changed
        """
        text = serialize_document(document)
        if self.exists():
            try:
                if self.path.read_text(encoding="utf-8") == text:
                    log_debug(f"[ConfigStore] {self.path} already normalized")
                    return False
            except OSError as e:
                log_debug(f"[ConfigStore] Could not compare with {self.path}, rewriting: {e}")
        self._write(text)
        log_info(f"[ConfigStore] Saved normalized configuration to {self.path}")
        return True

    def _write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self.path)
