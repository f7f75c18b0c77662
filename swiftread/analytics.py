"""Usage log: one record per text read, kept as a JSON list on disk."""

from __future__ import annotations

import json
import logging
import statistics
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class ReadRecord:
    id: str
    timestamp: float
    word_count: int
    wpm: float
    user_id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReadRecord":
        return cls(
            id=str(data.get("id") or uuid.uuid4().hex),
            timestamp=float(data.get("timestamp", 0.0)),
            word_count=int(data.get("word_count", 0)),
            wpm=float(data.get("wpm", 0)),
            user_id=str(data.get("user_id") or ""),
        )


class UsageLog:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(
        self,
        word_count: int,
        rate: Union[int, float],
        user_id: Optional[str] = None,
    ) -> ReadRecord:
        rec = ReadRecord(
            id=uuid.uuid4().hex,
            timestamp=time.time(),
            word_count=int(word_count),
            wpm=rate,
            user_id=user_id or "",
        )
        with self._lock:
            records = self._load()
            records.insert(0, rec)
            self._save(records)
        logger.info("Recorded read of %d words at %s wpm", rec.word_count, rec.wpm)
        return rec

    def sessions(self) -> List[ReadRecord]:
        with self._lock:
            return self._load()

    def clear(self) -> None:
        with self._lock:
            self._save([])
        logger.info("Cleared usage log %s", self.path)

    def summary(self) -> Dict[str, Any]:
        records = self.sessions()
        total = len(records)
        counts = sorted(r.word_count for r in records)
        users = {r.user_id for r in records if r.user_id}
        anonymous = sum(1 for r in records if not r.user_id)

        return {
            "unique_users": len(users) + (1 if anonymous else 0),
            "total_texts_read": total,
            "avg_word_count": round(sum(counts) / total) if total else 0,
            "median_word_count": statistics.median(counts) if counts else 0,
            "avg_wpm": round(sum(r.wpm for r in records) / total) if total else 0,
            "sessions": [asdict(r) for r in records],
        }

    def _load(self) -> List[ReadRecord]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Usage log %s is unreadable; starting empty", self.path, exc_info=True)
            return []
        if not isinstance(data, list):
            logger.warning("Usage log %s is not a list; starting empty", self.path)
            return []
        return [ReadRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def _save(self, records: List[ReadRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([asdict(r) for r in records], indent=2), encoding="utf-8")
        tmp.replace(self.path)
