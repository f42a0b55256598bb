import asyncio
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError

# Ensure src is in python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from ubcscraper.collectors.navigator import PageNavigator
from ubcscraper.core.config import Settings

LISTING_URL = "https://courses.test/cs/courseschedule?tname=subj-all-departments"


# ----------------------------------------------------------------------------
# Fake Playwright objects backed by BeautifulSoup
# ----------------------------------------------------------------------------


class FakeElement:
    def __init__(self, tag):
        self.tag = tag

    async def query_selector(self, selector: str):
        found = self.tag.select_one(selector)
        return FakeElement(found) if found is not None else None

    async def query_selector_all(self, selector: str):
        return [FakeElement(t) for t in self.tag.select(selector)]

    async def inner_text(self) -> str:
        return self.tag.get_text()

    async def get_attribute(self, name: str):
        return self.tag.get(name)


class FakeResponse:
    def __init__(self, status: int):
        self.status = status
        self.ok = 200 <= status < 400


class FakePage(FakeElement):
    """A tab. DOM queries on a `detached` URL fail the way a navigated-away frame does."""

    def __init__(self, site: "FakeSite"):
        super().__init__(BeautifulSoup("", "html.parser"))
        self.site = site
        self.url: Optional[str] = None
        self.routes: List = []
        self.closed = False

    async def query_selector(self, selector: str):
        self._check_attached()
        return await super().query_selector(selector)

    async def query_selector_all(self, selector: str):
        self._check_attached()
        return await super().query_selector_all(selector)

    def _check_attached(self) -> None:
        if self.url in self.site.detached:
            raise PlaywrightError("Execution context was destroyed, most likely because of a navigation")

    async def route(self, pattern: str, handler) -> None:
        self.routes.append((pattern, handler))

    async def goto(self, url: str, timeout: Optional[int] = None):
        self.url = url
        self.site.visits.append(url)
        if url in self.site.interrupted:
            raise asyncio.CancelledError()
        if url in self.site.broken:
            raise PlaywrightError(f"net::ERR_CONNECTION_RESET at {url}")
        html = self.site.pages.get(url)
        if html is None:
            return FakeResponse(404)
        self.tag = BeautifulSoup(html, "html.parser")
        return FakeResponse(200)

    async def close(self) -> None:
        self.closed = True


class FakeSite:
    """Stands in for a Playwright BrowserContext serving fixed pages."""

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        broken: Iterable[str] = (),
        detached: Iterable[str] = (),
        interrupted: Iterable[str] = (),
    ):
        self.pages = dict(pages or {})
        self.broken = set(broken)
        self.detached = set(detached)
        self.interrupted = set(interrupted)
        self.crashed = False
        self.visits: List[str] = []
        self.created: List[FakePage] = []
        self.max_open = 0

    async def new_page(self) -> FakePage:
        if self.crashed:
            raise PlaywrightError("Target page, context or browser has been closed")
        page = FakePage(self)
        self.created.append(page)
        self.max_open = max(self.max_open, len(self.open_pages))
        return page

    async def close(self) -> None:
        pass

    @property
    def open_pages(self) -> List[FakePage]:
        return [p for p in self.created if not p.closed]


# ----------------------------------------------------------------------------
# HTML builders mirroring the Course Schedule markup
# ----------------------------------------------------------------------------


def listing_html(hrefs: Sequence[Optional[str]]) -> str:
    rows = []
    for i, href in enumerate(hrefs):
        first = f'<a href="{href}">ITEM{i}</a>' if href else f"ITEM{i}"
        rows.append(f"<tr><td>{first}</td><td>Name {i}</td></tr>")
    return f'<table id="mainTable"><tbody>{"".join(rows)}</tbody></table>'


def section_row(
    title: str = "",
    href: Optional[str] = None,
    status: str = "",
    activity: str = "",
    term: str = "1",
    day: str = "Mon Wed Fri",
    start: str = "9:00",
    end: str = "10:00",
) -> str:
    title_cell = f'<a href="{href or "#"}">{title}</a>' if title else ""
    return (
        f"<tr><td>{status}</td><td>{title_cell}</td><td>{activity}</td>"
        f"<td>{term}</td><td>In-Person</td><td>{day}</td>"
        f"<td>{start}</td><td>{end}</td></tr>"
    )


def course_html(
    code: str,
    title: str,
    prereq: Optional[str] = None,
    coreq_links: Optional[Sequence[str]] = None,
    rows: Sequence[str] = (),
) -> str:
    paragraphs = "<p>Course description.</p><p>Credits: 4</p>"
    if prereq is not None:
        paragraphs += f"<p>{prereq}</p>"
        if coreq_links is not None:
            links = ", ".join(f'<a href="/c/{c}">{c}</a>' for c in coreq_links)
            paragraphs += f"<p>Co-reqs: {links}</p>"
    dept = code.split()[0]
    return f"""
    <ul class="breadcrumb expand">
      <li>Home</li><li>Subjects</li><li>{dept}</li><li>{code}</li>
    </ul>
    <div class="content expand">
      <h4>{title}</h4>
      {paragraphs}
      <table class="table table-striped section-summary">
        <tbody>{"".join(rows)}</tbody>
      </table>
    </div>
    """


def section_page_html(instructor: Optional[str]) -> str:
    cell = f'<a href="/i/1">{instructor}</a>' if instructor else ""
    return f"""
    <div class="content expand">
      <table><tbody><tr><td>Section</td></tr></tbody></table>
      <table><tbody><tr><td>Seats</td></tr></tbody></table>
      <table><tbody><tr><td>Instructor:</td><td>{cell}</td></tr></tbody></table>
    </div>
    """


# ----------------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        catalog_url=LISTING_URL,
        snapshot_path=tmp_path / "output.json",
        test_snapshot_path=tmp_path / "output_test.json",
        max_concurrent=3,
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
    )


@pytest.fixture
def make_navigator(settings: Settings):
    def _make(site: FakeSite) -> PageNavigator:
        return PageNavigator(settings, context=site)

    return _make
