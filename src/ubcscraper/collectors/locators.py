"""
CSS locators for every page of the UBC Course Schedule.

The schedule has no stable ids or classes for most fields, so fields are found
by position (nth-child / nth-of-type). When the markup changes, edit these maps.
Locators in ROW_LOCATORS and SECTION_LOCATORS are relative to their scope
(a table row, a section page).
"""

# Listing pages (all departments, one department): first cell of each row links onward
LISTING_LOCATORS = {
    "links": "#mainTable > tbody > tr > td:nth-child(1) a",
}

# Course page
COURSE_LOCATORS = {
    "code": ".breadcrumb.expand > li:nth-child(4)",
    "title": ".content.expand > h4",
    "prerequisites": ".content.expand > p:nth-of-type(3)",
    "corequisites": ".content.expand > p:nth-of-type(4)",
    "corequisite_links": "a",
    "section_rows": ".table.table-striped.section-summary > tbody > tr",
}

# One row of the section table
ROW_LOCATORS = {
    "status": "td:nth-child(1)",
    "title": "td:nth-child(2) a",
    "activity": "td:nth-child(3)",
    "term": "td:nth-child(4)",
    "day": "td:nth-child(6)",
    "start": "td:nth-child(7)",
    "end": "td:nth-child(8)",
}

# Section page
SECTION_LOCATORS = {
    "instructor": ".content.expand > table:nth-of-type(3) > tbody > tr > td:nth-of-type(2) a",
}

# Sub-requests aborted on every tab
BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font"})
