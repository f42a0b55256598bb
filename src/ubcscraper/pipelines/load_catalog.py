"""
Loads a snapshot into the database.

The three catalog tables are dropped and recreated on every load, then filled
from the snapshot:
1. CoReq
2. PreReq
3. CourseSection

Each table is committed on its own. If one fails, the tables before it keep
their rows and PersistenceFailure is raised.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from ..collectors.snapshot import load_snapshot
from ..core.config import get_settings
from ..core.exceptions import PersistenceFailure
from ..database.base import (
    CoReqDB,
    CourseSectionDB,
    PreReqDB,
    count_rows,
    create_db_engine,
    get_session,
    insert_rows,
    reset_catalog_tables,
)
from .projector import project_catalog

logger = logging.getLogger(__name__)


def load_catalog(
    snapshot_path: Optional[Union[str, Path]] = None, engine=None
) -> Dict[str, Any]:
    """
    Replace the catalog tables with the contents of a snapshot.

    Args:
        snapshot_path: Snapshot to load (defaults to settings.snapshot_path)
        engine: Optional SQLAlchemy engine (defaults to the configured database)

    Returns:
        Dictionary with the number of courses read and rows inserted per table
    """
    start_time = time.time()
    snapshot_path = Path(snapshot_path or get_settings().snapshot_path)

    courses = load_snapshot(snapshot_path)
    logger.info(f"{len(courses)} courses in {snapshot_path}")

    rows = project_catalog(courses)
    logger.info(f"Found {len(rows.coreqs)} co-requisites.")
    logger.info(f"Found {len(rows.prereqs)} pre-requisites.")
    logger.info(f"Found {len(rows.course_sections)} course sections.")

    engine = engine if engine is not None else create_db_engine()
    try:
        reset_catalog_tables(engine)
    except SQLAlchemyError as e:
        logger.error(f"Could not recreate catalog tables: {e}")
        raise PersistenceFailure("catalog tables", str(e)) from e

    results: Dict[str, Any] = {"courses": len(courses)}
    steps = [
        ("coreqs", "co-requisites", CoReqDB, rows.coreqs),
        ("prereqs", "pre-requisites", PreReqDB, rows.prereqs),
        ("course_sections", "course sections", CourseSectionDB, rows.course_sections),
    ]

    session = get_session(engine)
    try:
        for key, label, model, table_rows in steps:
            try:
                insert_rows(session, model, [row.model_dump() for row in table_rows])
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(
                    f"Error inserting {len(table_rows)} {label} into {model.__tablename__}: {e}"
                )
                raise PersistenceFailure(model.__tablename__, str(e)) from e

            results[key] = count_rows(session, model)
            logger.info(f"Inserted {results[key]} {label}.")
    finally:
        session.close()

    results["elapsed_seconds"] = time.time() - start_time
    return results
