import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from uic406.config import AUDIT_DIR_ENV, DEFAULT_AUDIT_DIR

AUDIT_DIR = Path(os.getenv(AUDIT_DIR_ENV) or DEFAULT_AUDIT_DIR)
AUDIT_FILE = AUDIT_DIR / "events.jsonl"


def write_audit(event: Dict[str, Any]) -> None:
    # append a JSONL entry
    AUDIT_FILE.parent.mkdir(parents=True, exist_ok=True)
    record = {"ts": datetime.now(timezone.utc).isoformat(), **event}
    with AUDIT_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
