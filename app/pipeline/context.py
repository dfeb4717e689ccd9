from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from app.storage.models import UploadedFile


@dataclass(slots=True)
class PipelineContext:
    upload: UploadedFile
    file_path: Path | None = None
    content: str = ""
    literature_id: int | None = None
    reading_guide: str = ""
    error_message: str = ""

    def require_literature_id(self) -> int:
        if self.literature_id is None:
            raise ValueError("PipelineContext.literature_id must be set first")
        return self.literature_id


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
