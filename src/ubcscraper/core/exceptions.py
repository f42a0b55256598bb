"""
Exceptions raised while scraping the course schedule and loading it into the database.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for every scraper and loader failure"""


class ExtractionMiss(CatalogError):
    """An expected DOM element is absent from the page"""

    def __init__(self, selector: str, url: Optional[str] = None):
        self.selector = selector
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(f"Nothing matched '{selector}'{where}")


class OrphanMeetingRow(CatalogError):
    """A continuation row showed up before any section was opened"""

    def __init__(self, row_index: int, url: Optional[str] = None):
        self.row_index = row_index
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(
            f"Row {row_index} has no section title and no section is open{where}"
        )


class NavigationFailure(CatalogError):
    """A page could not be loaded or its DOM could not be read"""

    def __init__(self, url: Optional[str], reason: str = ""):
        self.url = url
        self.reason = reason
        where = url or "page"
        super().__init__(f"Failed to load {where}: {reason}" if reason else f"Failed to load {where}")


class PersistenceFailure(CatalogError):
    """Writing rows to the database failed"""

    def __init__(self, table: str, reason: str = ""):
        self.table = table
        self.reason = reason
        super().__init__(f"Error inserting into {table}: {reason}")


class SubjectIndexError(CatalogError, ValueError):
    """--subject is outside the subject listing"""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Subject index must be in [0, {count - 1}], got {index}")
