"""
Crawler for the UBC Course Schedule.

Walks:
- The all-departments listing (one link per subject)
- Each subject page (one link per course)
- Each course page, extracted into a Course

Course pages are scraped concurrently, capped by a semaphore. A subject or
course that fails is recorded and skipped unless fail_fast is set. Results
keep listing order.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, List, Optional
from urllib.parse import urljoin

from ..core.config import Settings, get_settings
from ..core.exceptions import CatalogError, SubjectIndexError
from ..models.schema import Course, CrawlFailure, CrawlResult
from .course_extractor import CourseExtractor
from .locators import LISTING_LOCATORS
from .navigator import PageNavigator
from .snapshot import failures_path_for, save_failures, save_snapshot

logger = logging.getLogger(__name__)


async def _gather_all(aws: List[Awaitable]) -> list:
    """gather() that cancels the remaining tasks when one of them raises."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class CatalogCrawler:
    """Crawls subjects -> courses -> course pages"""

    def __init__(
        self,
        navigator: PageNavigator,
        settings: Optional[Settings] = None,
        max_concurrent: Optional[int] = None,
        fail_fast: bool = False,
        extractor: Optional[CourseExtractor] = None,
    ):
        self.navigator = navigator
        self.settings = settings or navigator.settings or get_settings()
        self.max_concurrent = max(1, max_concurrent or self.settings.max_concurrent)
        self.fail_fast = fail_fast
        self.extractor = extractor or CourseExtractor(navigator)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_links(self, url: str) -> List[str]:
        """Absolute URLs linked from the first column of a listing table."""
        async with self.navigator.page(url) as page:
            anchors = await self.navigator.query_all(page, LISTING_LOCATORS["links"])
            hrefs = [
                await self.navigator.element_attribute(a, "href", url) for a in anchors
            ]
        # subjects with no courses this session have no link
        return [urljoin(url, href) for href in hrefs if href]

    async def list_subjects(self) -> List[str]:
        return await self.list_links(self.settings.catalog_url)

    async def list_courses(self, subject_url: str) -> List[str]:
        return await self.list_links(subject_url)

    # ------------------------------------------------------------------
    # Crawl
    # ------------------------------------------------------------------

    async def crawl(self, subject_index: Optional[int] = None) -> CrawlResult:
        """
        Crawl every subject, or only the subject at `subject_index`.

        A failure loading the top-level listing always aborts the crawl.
        """
        subjects = await self.list_subjects()
        logger.info(f"Found {len(subjects)} subjects")

        if subject_index is not None:
            if not 0 <= subject_index < len(subjects):
                raise SubjectIndexError(subject_index, len(subjects))
            subjects = [subjects[subject_index]]

        failures: List[CrawlFailure] = []
        semaphore = asyncio.Semaphore(self.max_concurrent)

        per_subject = await _gather_all(
            [
                self._crawl_subject(url, i, len(subjects), semaphore, failures)
                for i, url in enumerate(subjects, 1)
            ]
        )

        courses = [course for subject_courses in per_subject for course in subject_courses]
        return CrawlResult(courses=courses, failures=failures, subject_count=len(subjects))

    async def _crawl_subject(
        self,
        subject_url: str,
        position: int,
        total: int,
        semaphore: asyncio.Semaphore,
        failures: List[CrawlFailure],
    ) -> List[Course]:
        try:
            async with semaphore:
                course_urls = await self.list_courses(subject_url)
        except CatalogError as e:
            self._record_failure(failures, subject_url, "subject", e)
            return []

        outcomes = await _gather_all(
            [
                self._crawl_course(url, i, len(course_urls), semaphore, failures)
                for i, url in enumerate(course_urls, 1)
            ]
        )
        courses = [course for course in outcomes if course is not None]
        logger.info(
            f"Finished subject {position} of {total}: {len(courses)}/{len(course_urls)} courses ({subject_url})"
        )
        return courses

    async def _crawl_course(
        self,
        course_url: str,
        position: int,
        total: int,
        semaphore: asyncio.Semaphore,
        failures: List[CrawlFailure],
    ) -> Optional[Course]:
        async with semaphore:
            try:
                course = await self.extractor.extract(course_url)
            except CatalogError as e:
                self._record_failure(failures, course_url, "course", e)
                return None

        logger.info(f"Pushed {course.code} ({position} of {total})")
        return course

    def _record_failure(
        self, failures: List[CrawlFailure], url: str, stage: str, error: CatalogError
    ) -> None:
        if self.fail_fast:
            raise error
        logger.error(f"Skipping {stage} {url}: {type(error).__name__}: {error}")
        failures.append(
            CrawlFailure(
                url=url, stage=stage, error_type=type(error).__name__, message=str(error)
            )
        )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot_path(self, subject_index: Optional[int] = None) -> Path:
        """Single-subject runs never overwrite the full snapshot."""
        if subject_index is not None:
            return Path(self.settings.test_snapshot_path)
        return Path(self.settings.snapshot_path)

    async def run(
        self, subject_index: Optional[int] = None, output_path: Optional[Path] = None
    ) -> CrawlResult:
        """Crawl, then write the snapshot (and the failure report, if any) once."""
        started = time.time()
        result = await self.crawl(subject_index)

        output_path = Path(output_path) if output_path else self.snapshot_path(subject_index)
        save_snapshot(result.courses, output_path)

        failures_path = failures_path_for(output_path)
        if result.failures:
            save_failures(result.failures, failures_path)
        elif failures_path.exists():
            # report from an earlier run no longer applies
            failures_path.unlink()

        logger.info(
            f"Crawl finished in {time.time() - started:.1f}s: "
            f"{len(result.courses)} courses, {len(result.failures)} failures"
        )
        return result


async def run_crawl(
    settings: Optional[Settings] = None,
    subject_index: Optional[int] = None,
    output_path: Optional[Path] = None,
    max_concurrent: Optional[int] = None,
    fail_fast: bool = False,
) -> CrawlResult:
    """Start a browser, crawl the catalog and write the snapshot."""
    settings = settings or get_settings()
    async with PageNavigator(settings) as navigator:
        crawler = CatalogCrawler(
            navigator, settings, max_concurrent=max_concurrent, fail_fast=fail_fast
        )
        return await crawler.run(subject_index=subject_index, output_path=output_path)
