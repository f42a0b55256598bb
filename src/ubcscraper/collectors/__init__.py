"""
Scraping pipeline for the UBC Course Schedule.

Walks the subject listing, every subject's course listing and every course
page, and writes the result to a single snapshot file.
"""

from .course_extractor import CourseExtractor, extract_course_codes
from .crawler import CatalogCrawler, run_crawl
from .navigator import PageHandle, PageNavigator
from .row_merger import MergeState, RowMerger, merge_rows
from .section_extractor import SectionExtractor
from .snapshot import load_snapshot, save_snapshot

__all__ = [
    # Browser
    "PageNavigator",
    "PageHandle",
    # Extraction
    "CourseExtractor",
    "SectionExtractor",
    "RowMerger",
    "MergeState",
    "merge_rows",
    "extract_course_codes",
    # Crawl
    "CatalogCrawler",
    "run_crawl",
    # Snapshots
    "save_snapshot",
    "load_snapshot",
]
