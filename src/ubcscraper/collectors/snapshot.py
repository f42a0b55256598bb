"""
Snapshot files.

A snapshot is a JSON array of courses using the field names the frontend and
loader read (courseTitle, courseCode, preReqs, coReqs, sections, ...). It is
written once per crawl, through a temp file and os.replace, so a reader
never sees a half-written snapshot.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import TypeAdapter

from ..models.schema import Course, CrawlFailure

logger = logging.getLogger(__name__)

_courses = TypeAdapter(List[Course])
_failures = TypeAdapter(List[CrawlFailure])


def _atomic_write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def save_snapshot(courses: Iterable[Course], path: Union[str, Path]) -> Path:
    path = Path(path)
    courses = list(courses)
    _atomic_write(path, _courses.dump_json(courses, by_alias=True, indent=2))
    logger.info(f"Wrote {len(courses)} courses to {path}")
    return path


def load_snapshot(path: Union[str, Path]) -> List[Course]:
    """Read a snapshot. Raises FileNotFoundError or pydantic.ValidationError."""
    return _courses.validate_json(Path(path).read_bytes())


def failures_path_for(snapshot_path: Union[str, Path]) -> Path:
    """data/output.json -> data/output.failures.json"""
    snapshot_path = Path(snapshot_path)
    return snapshot_path.with_name(f"{snapshot_path.stem}.failures.json")


def save_failures(failures: Iterable[CrawlFailure], path: Union[str, Path]) -> Path:
    path = Path(path)
    failures = list(failures)
    _atomic_write(path, _failures.dump_json(failures, indent=2))
    logger.info(f"Wrote {len(failures)} failed URLs to {path}")
    return path


def load_failures(path: Union[str, Path]) -> List[CrawlFailure]:
    return _failures.validate_json(Path(path).read_bytes())
