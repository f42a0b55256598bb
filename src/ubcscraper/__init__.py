"""
UBC Course Schedule scraper: crawl subjects, courses and sections into a
snapshot, then load the snapshot into CourseSection / PreReq / CoReq tables.
"""

__version__ = "1.0.0"
