"""
Groups the rows of a course's section table into sections.

A section spans one row per meeting time: the first row carries the section
title, the following rows leave the title cell empty. The table has no end
marker, so the last open section is closed by an explicit end-of-input step.

    AWAITING_SECTION --titled row--> IN_SECTION
    IN_SECTION       --titled row--> IN_SECTION (previous section closed)
    IN_SECTION       --blank row---> IN_SECTION (meeting appended)
    AWAITING_SECTION --blank row---> OrphanMeetingRow
    any              --finish()----> done
"""

from enum import Enum
from typing import Iterable, List, Optional

from ..core.exceptions import OrphanMeetingRow
from ..models.schema import Section, SectionRow


class MergeState(str, Enum):
    AWAITING_SECTION = "awaiting_section"
    IN_SECTION = "in_section"


class RowMerger:
    """Feed rows in document order, then call finish() once."""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self.state = MergeState.AWAITING_SECTION
        self._current: Optional[Section] = None
        self._sections: List[Section] = []
        self._row_index = 0
        self._finished = False

    def feed(self, row: SectionRow) -> None:
        if self._finished:
            raise RuntimeError("RowMerger already finished")

        if not row.is_continuation:
            self._close_current()
            self._current = Section(
                title=row.title.strip(),
                status=row.status,
                activity=row.activity,
                url=row.url,
                meetings=[row.meeting()],
            )
            self.state = MergeState.IN_SECTION
        elif self.state is MergeState.IN_SECTION:
            self._current.meetings.append(row.meeting())
        else:
            raise OrphanMeetingRow(self._row_index, self.url)

        self._row_index += 1

    def finish(self) -> List[Section]:
        """End of input: close the open section and return all sections."""
        if not self._finished:
            self._close_current()
            self._finished = True
        return list(self._sections)

    def _close_current(self) -> None:
        if self._current is not None:
            self._sections.append(self._current)
            self._current = None
        self.state = MergeState.AWAITING_SECTION


def merge_rows(rows: Iterable[SectionRow], url: Optional[str] = None) -> List[Section]:
    merger = RowMerger(url)
    for row in rows:
        merger.feed(row)
    return merger.finish()
