from app.database.models import LiteratureStatus, NewLiterature
from app.database.repositories.literature_repository import LiteratureRepository
from app.extraction.content_extractor import ContentExtractor
from app.logging.logger import Log
from app.pipeline.ai_service import LiteratureAiService
from app.pipeline.classification import ClassificationStage
from app.pipeline.context import PipelineContext, PipelineStep
from app.storage.file_storage import FileStorage


class SaveFileStep(PipelineStep):
    def __init__(self, file_storage: FileStorage) -> None:
        self._file_storage = file_storage

    def run(self, context: PipelineContext) -> PipelineContext:
        context.file_path = self._file_storage.save(context.upload)
        return context


class ExtractContentStep(PipelineStep):
    def __init__(self, content_extractor: ContentExtractor) -> None:
        self._content_extractor = content_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.file_path is None:
            raise ValueError("PipelineContext.file_path must be set before extraction")
        context.content = self._content_extractor.extract(context.file_path)
        return context


class CreateLiteratureStep(PipelineStep):
    def __init__(self, literature_repo: LiteratureRepository) -> None:
        self._literature_repo = literature_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.file_path is None:
            raise ValueError("PipelineContext.file_path must be set before creating literature")
        context.literature_id = self._literature_repo.create(
            NewLiterature(
                original_name=context.upload.filename,
                file_path=str(context.file_path),
                file_size=context.upload.size,
                file_type=context.upload.file_type,
                content_length=len(context.content),
            )
        )
        return context


class GenerateGuideStep(PipelineStep):
    """Generates the whole reading guide with one blocking call."""

    def __init__(self, ai_service: LiteratureAiService) -> None:
        self._ai_service = ai_service

    def run(self, context: PipelineContext) -> PipelineContext:
        context.reading_guide = self._ai_service.generate_reading_guide(context.content)
        return context


class ReloadGuideStep(PipelineStep):
    """Reads back the guide accumulated in the database by streamed appends."""

    def __init__(self, literature_repo: LiteratureRepository) -> None:
        self._literature_repo = literature_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        literature = self._literature_repo.get_by_id(context.require_literature_id())
        context.reading_guide = literature.reading_guide or ""
        return context


class FinalizeGuideStep(PipelineStep):
    """Persists a non-empty guide and dispatches classification.

    An empty guide completes the literature directly; classification is
    skipped.
    """

    def __init__(
        self,
        literature_repo: LiteratureRepository,
        classification: ClassificationStage,
    ) -> None:
        self._literature_repo = literature_repo
        self._classification = classification

    def run(self, context: PipelineContext) -> PipelineContext:
        literature_id = context.require_literature_id()
        if not context.reading_guide.strip():
            Log.warning(
                f"Literature {literature_id} has an empty reading guide, skipping classification"
            )
            self._literature_repo.update_status(literature_id, LiteratureStatus.COMPLETED)
            return context

        self._literature_repo.update_reading_guide(literature_id, context.reading_guide)
        self._classification.dispatch(literature_id, context.reading_guide)
        return context


class MarkFailedStep(PipelineStep):
    """Marks the literature failed, if it was created. Never raises."""

    def __init__(self, literature_repo: LiteratureRepository) -> None:
        self._literature_repo = literature_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.literature_id is None:
            return context
        try:
            self._literature_repo.update_status(context.literature_id, LiteratureStatus.FAILED)
            Log.error(
                f"Literature {context.literature_id} marked as failed: {context.error_message}"
            )
        except Exception:
            Log.exception(f"Could not mark literature {context.literature_id} failed")
        return context
