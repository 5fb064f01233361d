"""Per-session persistence of validation loop state."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from edgeworker.util.logging import get_logger
from edgeworker.validation.loop import ValidationLoopState, state_from_json, state_to_json


logger = get_logger(__name__)


class LoopStateStore:
    """Stores one JSON file per agent session under ``<base_dir>/validation``."""

    def __init__(self, base_dir: Path) -> None:
        self.root = Path(base_dir) / "validation"

    def _path(self, session_id: str) -> Path:
        # Percent-encoded, so distinct ids map to distinct files.
        safe = quote(session_id, safe="")
        if safe in {"", ".", ".."}:
            raise ValueError(f"invalid session id {session_id!r}")
        return self.root / f"{safe}.json"

    def save(self, session_id: str, state: ValidationLoopState) -> Path:
        path = self._path(session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(state_to_json(state), encoding="utf-8")
        tmp_path.replace(path)
        logger.debug("Saved validation state for session %s (iteration=%s).", session_id, state.iteration)
        return path

    def load(self, session_id: str) -> ValidationLoopState | None:
        path = self._path(session_id)
        if not path.exists():
            return None
        return state_from_json(path.read_text(encoding="utf-8"))

    def delete(self, session_id: str) -> bool:
        path = self._path(session_id)
        if not path.exists():
            return False
        path.unlink()
        return True
