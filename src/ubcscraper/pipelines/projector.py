"""
Projects a snapshot into the rows of the CourseSection, PreReq and CoReq tables.

No I/O. The input courses are not modified.
"""

from typing import Iterable, List, Sequence

from ..models.schema import (
    CatalogRows,
    Course,
    CourseSectionRow,
    RequisiteRow,
    split_course_code,
)


def requisite_rows(course: Course, codes: Iterable[str]) -> List[RequisiteRow]:
    """One edge per listed code; a code listed twice gives two edges."""
    rows = []
    for code in codes:
        req_dept, req_number = split_course_code(code)
        rows.append(
            RequisiteRow(
                dept=course.department,
                number=course.number,
                req_dept=req_dept,
                req_number=req_number,
            )
        )
    return rows


def course_section_rows(course: Course) -> List[CourseSectionRow]:
    """One row per meeting of every section."""
    return [
        CourseSectionRow(
            course_title=course.title,
            dept=course.department,
            number=course.number,
            section_title=section.title,
            status=section.status,
            activity=section.activity,
            instructor=section.instructor,
            term=meeting.term,
            day=meeting.day,
            start=meeting.start,
            end=meeting.end,
        )
        for section in course.sections
        for meeting in section.meetings
    ]


def project_catalog(courses: Sequence[Course]) -> CatalogRows:
    rows = CatalogRows()
    for course in courses:
        rows.prereqs.extend(requisite_rows(course, course.prerequisites))
        rows.coreqs.extend(requisite_rows(course, course.corequisites))
        rows.course_sections.extend(course_section_rows(course))
    return rows
