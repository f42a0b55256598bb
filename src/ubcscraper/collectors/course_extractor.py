"""
Course page extraction.

Reads the course code and title, pulls prerequisite and corequisite course
codes out of the requisite paragraphs, and rebuilds the section table.
"""

import logging
import re
import time
from typing import Any, List, Optional

from ..core.exceptions import ExtractionMiss
from ..models.schema import Course, SectionRow
from .locators import COURSE_LOCATORS
from .navigator import PageNavigator
from .row_merger import merge_rows
from .section_extractor import SectionExtractor

logger = logging.getLogger(__name__)

# e.g. CPSC 110, MATH 200, EOSC 114A
COURSE_CODE_RE = re.compile(r"\b([A-Z]{2,4})\s(\d{3}[A-Z]?)\b")


def extract_course_codes(text: Optional[str]) -> List[str]:
    """
    Find every course code in free text, in order, duplicates kept.

    Prerequisites are written as prose ("One of CPSC 110, CPSC 121 and ..."),
    so this is a pattern match rather than a structured read.
    """
    if not text:
        return []
    return [f"{dept} {number}" for dept, number in COURSE_CODE_RE.findall(text)]


class CourseExtractor:
    """Builds a Course from one course page"""

    def __init__(self, navigator: PageNavigator, sections: Optional[SectionExtractor] = None):
        self.navigator = navigator
        self.sections = sections or SectionExtractor(navigator)

    async def extract(self, url: str) -> Course:
        started = time.perf_counter()
        nav = self.navigator

        async with nav.page(url) as page:
            code = await nav.inner_text(page, COURSE_LOCATORS["code"])
            if not code:
                raise ExtractionMiss(COURSE_LOCATORS["code"], url)
            title = await nav.inner_text(page, COURSE_LOCATORS["title"])

            prereq_text = await nav.inner_text(
                page, COURSE_LOCATORS["prerequisites"], optional=True
            )
            prerequisites = extract_course_codes(prereq_text)
            corequisites = await self._read_corequisites(page)
            rows = await self._read_rows(page, url)

        # Course tab is closed before any section page is opened
        sections = [
            await self.sections.resolve_instructor(section)
            for section in merge_rows(rows, url)
        ]

        course = Course(
            title=title,
            code=code,
            prerequisites=prerequisites,
            corequisites=corequisites,
            sections=sections,
        )
        logger.debug(
            f"Extracted {course.code} ({len(sections)} sections) in {time.perf_counter() - started:.2f}s"
        )
        return course

    async def _read_corequisites(self, page: Any) -> List[str]:
        nav = self.navigator
        paragraph = await nav.query_one(page, COURSE_LOCATORS["corequisites"])
        if paragraph is None:
            return []
        links = await nav.query_all(paragraph, COURSE_LOCATORS["corequisite_links"])
        texts = [await nav.element_text(a, page.url) for a in links]
        return [t for t in texts if t]

    async def _read_rows(self, page: Any, url: str) -> List[SectionRow]:
        elements = await self.navigator.query_all(page, COURSE_LOCATORS["section_rows"])
        return [await self.sections.read_row(row, base_url=url) for row in elements]
