import functools
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Type

from sqlalchemy import Column, Integer, String, create_engine, func, insert, select
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class CourseSectionDB(Base):
    """One meeting time of one section of a course"""

    __tablename__ = "coursesection"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_title = Column("coursetitle", String, nullable=False)
    dept = Column(String, nullable=False)
    number = Column(String, nullable=False)
    section_title = Column("sectiontitle", String, nullable=False)
    status = Column(String, nullable=True)
    activity = Column(String, nullable=True)
    instructor = Column(String, nullable=True)
    term = Column(String, nullable=True)
    day = Column(String, nullable=True)
    start = Column(String, nullable=True)
    end = Column(String, nullable=True)

    def __repr__(self):
        return f"<CourseSection(course='{self.dept} {self.number}', section='{self.section_title}', day='{self.day}')>"


class PreReqDB(Base):
    __tablename__ = "prereq"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dept = Column(String, nullable=False)
    number = Column(String, nullable=False)
    req_dept = Column("reqdept", String, nullable=False)
    req_number = Column("reqnumber", String, nullable=False)

    def __repr__(self):
        return f"<PreReq(course='{self.dept} {self.number}', requires='{self.req_dept} {self.req_number}')>"


class CoReqDB(Base):
    __tablename__ = "coreq"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dept = Column(String, nullable=False)
    number = Column(String, nullable=False)
    req_dept = Column("reqdept", String, nullable=False)
    req_number = Column("reqnumber", String, nullable=False)

    def __repr__(self):
        return f"<CoReq(course='{self.dept} {self.number}', requires='{self.req_dept} {self.req_number}')>"


CATALOG_MODELS = (PreReqDB, CoReqDB, CourseSectionDB)

# Global engine instance for connection pooling
_engine = None
_session_factory = None


def get_pool_config(url: str) -> Dict[str, Any]:
    """Connection pool settings; SQLite uses its own pool and takes none of these."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


def create_db_engine(url: Optional[str] = None):
    """
    Create a database engine.

    Without `url` the engine for settings.database_url is created once and reused.
    """
    global _engine

    if url is not None:
        return create_engine(url, **get_pool_config(url))

    if _engine is not None:
        return _engine

    url = get_settings().database_url
    logger.info("Creating database engine")
    _engine = create_engine(url, **get_pool_config(url))
    return _engine


def get_session_factory():
    global _session_factory

    if _session_factory is not None:
        return _session_factory

    _session_factory = sessionmaker(
        bind=create_db_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    return _session_factory


def get_session(engine=None):
    """Session on `engine`, or on the shared engine when none is given"""
    if engine is not None:
        return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    return get_session_factory()()


def monitor_db_performance(func_):
    """Log how long a database call took, warning on slow ones"""

    @functools.wraps(func_)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = func_(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func_.__name__} failed after {time.time() - start_time:.3f}s: {e}")
            raise
        execution_time = time.time() - start_time
        if execution_time > 1.0:
            logger.warning(f"Slow query in {func_.__name__}: {execution_time:.2f}s")
        else:
            logger.debug(f"Query {func_.__name__}: {execution_time:.3f}s")
        return result

    return wrapper


def reset_catalog_tables(engine) -> None:
    """Drop and recreate PreReq, CoReq and CourseSection."""
    tables = [model.__table__ for model in CATALOG_MODELS]
    Base.metadata.drop_all(engine, tables=tables)
    Base.metadata.create_all(engine, tables=tables)
    logger.info("Recreated tables: " + ", ".join(t.name for t in tables))


@monitor_db_performance
def insert_rows(session, model: Type[Base], rows: Sequence[Dict[str, Any]]) -> int:
    """Bulk insert `rows` (dicts keyed by attribute name) and commit."""
    if not rows:
        return 0
    session.execute(insert(model), list(rows))
    session.commit()
    return len(rows)


def count_rows(session, model: Type[Base]) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def all_rows(session, model: Type[Base]) -> List[Any]:
    return list(session.execute(select(model).order_by(model.id)).scalars().all())
