# engine/storage.py
import os
import json
import math
from typing import Any, Dict

EMPTY_SNAPSHOT: Dict[str, Any] = {"plans": {}, "savings": {}, "totals": {}}


def ensure_user_data_dir(path: str) -> None:
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder, exist_ok=True)


def _sanitize_json_compat(value: Any):
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(value, dict):
        return {key: _sanitize_json_compat(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_sanitize_json_compat(item) for item in value]
    return value


def load_snapshot(path: str) -> Dict[str, Any]:
    """Read the persisted plan/savings maps; a missing or empty file is an empty vault.

    A file that exists but cannot be parsed raises, so a corrupt vault is
    never silently replaced by an empty one.
    """
    if not os.path.exists(path):
        return {key: dict(val) for key, val in EMPTY_SNAPSHOT.items()}
    with open(path, "r", encoding="utf-8") as f:
        raw_text = f.read().strip()
    if not raw_text:
        return {key: dict(val) for key, val in EMPTY_SNAPSHOT.items()}
    data = json.loads(raw_text)
    snapshot = {key: dict(data.get(key) or {}) for key in EMPTY_SNAPSHOT}
    return _sanitize_json_compat(snapshot)


def save_snapshot(path: str, snapshot: Dict[str, Any]) -> None:
    ensure_user_data_dir(path)
    tmp_path = f"{path}.tmp"
    clean = _sanitize_json_compat(snapshot)
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(clean, f, allow_nan=False, indent=2, sort_keys=True)
    os.replace(tmp_path, path)
