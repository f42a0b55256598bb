from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_course_code(code: str) -> Tuple[str, str]:
    """Split 'CPSC 110' into ('CPSC', '110')."""
    parts = code.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].strip()


class Meeting(BaseModel):
    """One recurring time slot of a section, as published"""

    term: str
    day: str
    start: str
    end: str


class Section(BaseModel):
    """One offered section (lecture, lab, tutorial...) of a course"""

    title: str = Field(alias="sectionTitle")
    status: str
    activity: str
    instructor: str = Field(default="TBA", alias="prof")
    meetings: List[Meeting] = Field(alias="timeInfo", min_length=1)
    url: Optional[str] = Field(default=None, alias="sectionUrl")

    model_config = ConfigDict(populate_by_name=True)


class Course(BaseModel):
    """A course page with its requisites and sections"""

    title: str = Field(alias="courseTitle")
    code: str = Field(alias="courseCode")
    prerequisites: List[str] = Field(default_factory=list, alias="preReqs")
    corequisites: List[str] = Field(default_factory=list, alias="coReqs")
    sections: List[Section] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("code")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("course code must not be empty")
        return v

    @field_validator("prerequisites", "corequisites", "sections", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    @property
    def department(self) -> str:
        return split_course_code(self.code)[0]

    @property
    def number(self) -> str:
        return split_course_code(self.code)[1]


class SectionRow(BaseModel):
    """
    One raw <tr> of a course's section table.

    Rows without a title are extra meeting times for the section above them.
    """

    title: str = ""
    url: Optional[str] = None
    status: str = ""
    activity: str = ""
    term: str
    day: str
    start: str
    end: str

    @property
    def is_continuation(self) -> bool:
        return not self.title.strip()

    def meeting(self) -> Meeting:
        return Meeting(term=self.term, day=self.day, start=self.start, end=self.end)


class CrawlFailure(BaseModel):
    """A subject or course page that could not be scraped"""

    url: str
    stage: str  # "subject" or "course"
    error_type: str
    message: str


class CrawlResult(BaseModel):
    courses: List[Course] = Field(default_factory=list)
    failures: List[CrawlFailure] = Field(default_factory=list)
    subject_count: int = 0


class CourseSectionRow(BaseModel):
    """One row of the CourseSection table: a single meeting of a section"""

    course_title: str
    dept: str
    number: str
    section_title: str
    status: str
    activity: str
    instructor: str
    term: str
    day: str
    start: str
    end: str


class RequisiteRow(BaseModel):
    """One PreReq/CoReq edge from a course to a course it requires"""

    dept: str
    number: str
    req_dept: str
    req_number: str


class CatalogRows(BaseModel):
    course_sections: List[CourseSectionRow] = Field(default_factory=list)
    prereqs: List[RequisiteRow] = Field(default_factory=list)
    coreqs: List[RequisiteRow] = Field(default_factory=list)
