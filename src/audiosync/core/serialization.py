"""JSON serialization for lyric sequences and stored song records."""

import json
from typing import List, Optional

from .models import LyricLine, SongRecord


def lines_to_json(lines: List[LyricLine]) -> List[dict]:
    """Convert LyricLine objects into JSON-serializable dicts."""
    data: List[dict] = []
    for line in lines:
        item = {"start_time_ms": line.start_time_ms, "text": line.text}
        if line.translation is not None:
            item["translation"] = line.translation
        data.append(item)
    return data


def lines_from_json(data: List[dict]) -> List[LyricLine]:
    return [
        LyricLine(
            start_time_ms=float(item["start_time_ms"]),
            text=item.get("text", ""),
            translation=item.get("translation"),
        )
        for item in data
    ]


def record_to_json(record: SongRecord) -> dict:
    return {
        "track_id": record.track_id,
        "track_name": record.track_name,
        "saved_at": record.saved_at,
        "lines": lines_to_json(record.lines),
    }


def record_from_json(data: dict) -> SongRecord:
    """Rebuild a SongRecord; raises KeyError/ValueError on malformed input."""
    return SongRecord(
        track_id=data["track_id"],
        track_name=data.get("track_name", ""),
        lines=lines_from_json(data.get("lines", [])),
        saved_at=float(data.get("saved_at", 0.0)),
    )


def save_lines_to_json(filepath: str, lines: List[LyricLine], indent: Optional[int] = 2) -> None:
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(lines_to_json(lines), f, ensure_ascii=False, indent=indent)


def load_lines_from_json(filepath: str) -> List[LyricLine]:
    with open(filepath, "r", encoding="utf-8") as f:
        return lines_from_json(json.load(f))
