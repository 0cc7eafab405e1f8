"""
File-backed keyed store.

Keeps committed state in a single JSON document so that separate CLI
invocations see each other's transactions. Intended for single-process use.
"""

import json
import os
from pathlib import Path

import structlog

from policy_ledger.core.exceptions import HostFailureError
from policy_ledger.store.memory import InMemoryStore

logger = structlog.get_logger()


class JsonFileStore(InMemoryStore):
    """
    InMemoryStore that rewrites a JSON file after every commit.

    Values are stored as UTF-8 text, which holds for everything the ledger
    writes (JSON records and decimal scalars).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, bytes]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise HostFailureError(f"Failed to load store file {self.path}: {e}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("entries"), dict):
            raise HostFailureError(f"Store file {self.path} has no 'entries' mapping")

        entries = {key: value.encode("utf-8") for key, value in raw["entries"].items()}
        logger.debug("store_loaded", path=str(self.path), keys=len(entries))
        return entries

    def _persist(self, data: dict[str, bytes]) -> None:
        document = {
            "entries": {
                key: value.decode("utf-8") for key, value in sorted(data.items())
            },
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise HostFailureError(f"Failed to write store file {self.path}: {e}") from e
