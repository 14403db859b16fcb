# doc_catalog/core/seed_data.py

from datetime import datetime, timezone
from typing import List

from .models import Document


def _day(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def seed_documents() -> List[Document]:
    """
    The starter catalog used when nothing has been saved yet.

    A fresh list is built on every call so that a store can never mutate
    another store's seed records.
    """
    return [
        Document(
            id="1",
            name="Annual_report_2024.pdf",
            type="pdf",
            size=2547200,
            created_at=_day(2024, 1, 15),
            modified_at=_day(2024, 1, 20),
            tags=["report", "annual", "2024"],
            category="pdf",
            description="The company's annual report for 2024",
            is_favorite=True,
        ),
        Document(
            id="2",
            name="Project_presentation.pptx",
            type="presentation",
            size=5242880,
            created_at=_day(2024, 1, 10),
            modified_at=_day(2024, 1, 18),
            tags=["presentation", "project"],
            category="presentation",
            description="Kick-off presentation for the new project",
            is_favorite=False,
        ),
        Document(
            id="3",
            name="Budget_2024.xlsx",
            type="spreadsheet",
            size=1048576,
            created_at=_day(2024, 1, 5),
            modified_at=_day(2024, 1, 25),
            tags=["budget", "finance", "2024"],
            category="spreadsheet",
            description="Forecast budget for 2024",
            is_favorite=True,
        ),
    ]
