from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

_SUMMARY_LENGTH = 200


class LiteratureStatus(IntEnum):
    """Pipeline status stored in the literature.status column."""

    PROCESSING = 0
    COMPLETED = 1
    FAILED = 2

    @property
    def description(self) -> str:
        return self.name.capitalize()


@dataclass
class Literature:
    """Represents a row from the literature table."""

    id: int
    original_name: str
    file_path: str
    file_size: int
    file_type: str
    content_length: int
    status: int = LiteratureStatus.PROCESSING
    reading_guide: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def status_description(self) -> str:
        try:
            return LiteratureStatus(self.status).description
        except ValueError:
            return "Unknown"

    @property
    def reading_guide_summary(self) -> str | None:
        """First characters of the guide for list views, None when there is no guide."""
        if self.reading_guide is None or not self.reading_guide.strip():
            return None
        if len(self.reading_guide) > _SUMMARY_LENGTH:
            return self.reading_guide[:_SUMMARY_LENGTH] + "..."
        return self.reading_guide


@dataclass(frozen=True)
class NewLiterature:
    """Attributes of a literature row before it is inserted."""

    original_name: str
    file_path: str
    file_size: int
    file_type: str
    content_length: int
    status: LiteratureStatus = LiteratureStatus.PROCESSING
