import logging
from typing import Any, Optional
from urllib.parse import urljoin

from ..models.schema import Section, SectionRow
from .locators import ROW_LOCATORS, SECTION_LOCATORS
from .navigator import PageNavigator

logger = logging.getLogger(__name__)

# Only these activities have an instructor on their section page. Labs,
# tutorials and discussions are never fetched and always report TBA.
INSTRUCTOR_ACTIVITIES = frozenset({"Lecture", "Web-Oriented Course"})

TBA = "TBA"


class SectionExtractor:
    """Reads section table rows and looks up lecture instructors"""

    def __init__(self, navigator: PageNavigator):
        self.navigator = navigator

    async def read_row(self, row: Any, base_url: Optional[str] = None) -> SectionRow:
        """
        Read one <tr> of the section table.

        Status, title and activity cells are optional (continuation rows may
        leave them empty). The meeting cells are required.
        """
        nav = self.navigator

        title = await nav.inner_text(row, ROW_LOCATORS["title"], optional=True) or ""
        url = None
        if title:
            href = await nav.attribute(row, ROW_LOCATORS["title"], "href", optional=True)
            if href:
                url = urljoin(base_url, href) if base_url else href

        return SectionRow(
            title=title,
            url=url,
            status=await nav.inner_text(row, ROW_LOCATORS["status"], optional=True) or "",
            activity=await nav.inner_text(row, ROW_LOCATORS["activity"], optional=True) or "",
            term=await nav.inner_text(row, ROW_LOCATORS["term"]),
            day=await nav.inner_text(row, ROW_LOCATORS["day"]),
            start=await nav.inner_text(row, ROW_LOCATORS["start"]),
            end=await nav.inner_text(row, ROW_LOCATORS["end"]),
        )

    async def resolve_instructor(self, section: Section) -> Section:
        """Return a copy of `section` with its instructor filled in."""
        if section.activity not in INSTRUCTOR_ACTIVITIES:
            return section.model_copy(update={"instructor": TBA})

        if not section.url:
            logger.warning(f"Section {section.title} has no detail link, instructor set to {TBA}")
            return section.model_copy(update={"instructor": TBA})

        async with self.navigator.page(section.url) as page:
            # no instructor cell yet means the section is not staffed
            name = await self.navigator.inner_text(
                page, SECTION_LOCATORS["instructor"], optional=True
            )

        return section.model_copy(update={"instructor": name or TBA})
