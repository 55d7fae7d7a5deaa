from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Dict, List

from errors import StorageError

log = logging.getLogger(__name__)

USERS = "users"
POSTS = "posts"


class RecordStore:
    """A named collection of JSON records, loaded and saved wholesale.

    Nothing here locks: a load/modify/save cycle from two writers at once
    keeps only the last save.
    """

    def load(self, name: str) -> List[Dict]:
        raise NotImplementedError

    def save(self, name: str, records: List[Dict]) -> None:
        raise NotImplementedError


class JsonFileStore(RecordStore):
    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def ensure_file(self, name: str) -> Path:
        """Make sure the collection file exists."""
        path = self.path_for(name)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                json.dump([], fh)
            log.info("Created empty collection %s", path)
        return path

    def load(self, name: str) -> List[Dict]:
        path = self.ensure_file(name)
        with open(path, "r", encoding="utf-8") as fh:
            try:
                raw = json.load(fh)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise StorageError(f"{path} does not hold valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise StorageError(f"{path} does not hold a JSON array")
        return raw

    def save(self, name: str, records: List[Dict]) -> None:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(records, fh, indent=2)


class MemoryStore(RecordStore):
    """In-process store with the same contract, for tests."""

    def __init__(self, initial: Dict[str, List[Dict]] = None):
        self._collections: Dict[str, List[Dict]] = copy.deepcopy(initial or {})

    def load(self, name: str) -> List[Dict]:
        return copy.deepcopy(self._collections.setdefault(name, []))

    def save(self, name: str, records: List[Dict]) -> None:
        self._collections[name] = copy.deepcopy(list(records))
