"""Named-play storage (save / load / delete by name)."""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from .models import RouteSpec, SavedPlay
from .validation import validate_route_spec

logger = logging.getLogger("routethat_engine.playbook")


class PlayStore:
    """
    Thread-safe playbook keyed by play name.

    With a path, every change is written through to a JSON file and the file
    is read back on construction. A file that fails to parse raises instead
    of being replaced.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._data: Dict[str, SavedPlay] = {}
        self._lock = Lock()

        if self.path is not None and self.path.exists():
            self._read()

    def save(self, name: str, route_spec: RouteSpec) -> SavedPlay:
        """Create or replace the play with this name."""
        validate_route_spec(route_spec)
        play = SavedPlay(name=name, route_spec=route_spec)

        with self._lock:
            replaced = play.name in self._data
            self._data[play.name] = play
            self._write()

        logger.info(f"{'Updated' if replaced else 'Saved'} play '{play.name}'")
        return play

    def get(self, name: str) -> SavedPlay:
        """Get play by name; raises KeyError if absent."""
        with self._lock:
            if name not in self._data:
                raise KeyError(f"Play '{name}' not found")
            return self._data[name]

    def load(self) -> List[SavedPlay]:
        """All saved plays in insertion order."""
        with self._lock:
            return list(self._data.values())

    def delete(self, name: str) -> bool:
        """Delete play by name."""
        with self._lock:
            if name not in self._data:
                return False
            del self._data[name]
            self._write()
        logger.info(f"Deleted play '{name}'")
        return True

    def clear(self) -> None:
        """Clear all plays (for testing)."""
        with self._lock:
            self._data.clear()
            self._write()

    def count(self) -> int:
        with self._lock:
            return len(self._data)

    def _read(self) -> None:
        try:
            with open(self.path) as f:
                items = json.load(f)
            for item in items:
                play = SavedPlay(name=item["name"], route_spec=RouteSpec.model_validate(item["route_spec"]))
                self._data[play.name] = play
        except (OSError, ValueError, KeyError, TypeError) as e:
            # The unreadable file is left untouched
            logger.error(f"Failed to read playbook {self.path}: {e}")
            raise
        logger.info(f"Loaded {len(self._data)} plays from {self.path}")

    def _write(self) -> None:
        if self.path is None:
            return
        payload = [
            {"name": play.name, "route_spec": play.route_spec.to_wire()}
            for play in self._data.values()
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(self.path)


# Global instance
playbook = PlayStore()
