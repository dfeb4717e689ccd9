from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from app.config.settings import Settings
from app.database.repositories.literature_repository import LiteratureRepository
from app.extraction.factory import ContentExtractorFactory
from app.llm.client_base import BaseChatClient
from app.llm.factory import ChatClientFactory
from app.pipeline.ai_service import LiteratureAiService
from app.pipeline.batch_pipeline import BatchImportPipeline
from app.pipeline.classification import ClassificationStage, Spawner, start_background_thread
from app.pipeline.guide_pipeline import GuidePipeline
from app.pipeline.steps import (
    CreateLiteratureStep,
    ExtractContentStep,
    FinalizeGuideStep,
    GenerateGuideStep,
    MarkFailedStep,
    ReloadGuideStep,
    SaveFileStep,
)
from app.storage.file_storage import FileStorage


@dataclass(frozen=True)
class Pipelines:
    guide: GuidePipeline
    batch: BatchImportPipeline
    executor: Executor


def build_pipelines(
    settings: Settings,
    *,
    client: BaseChatClient | None = None,
    literature_repo: LiteratureRepository | None = None,
    executor: Executor | None = None,
    files_root: Path | None = None,
    spawn: Spawner = start_background_thread,
) -> Pipelines:
    """Build the single-document and batch pipelines with all required adapters."""
    literature_repo = literature_repo or LiteratureRepository()
    executor = executor or ThreadPoolExecutor(
        max_workers=max(1, settings.worker_pool_size),
        thread_name_prefix="literature-worker",
    )
    ai_service = LiteratureAiService(
        client=client or ChatClientFactory.create(settings),
        model=settings.llm_model_name,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        guide_prompt_path=settings.guide_prompt_path,
        classification_prompt_path=settings.classification_prompt_path,
    )
    file_storage = FileStorage(
        files_root=files_root or settings.files_root,
        max_size_bytes=settings.max_upload_size_bytes,
    )
    content_extractor = ContentExtractorFactory.create(settings)
    classification = ClassificationStage(ai_service, literature_repo, spawn=spawn)

    save_file = SaveFileStep(file_storage)
    extract_content = ExtractContentStep(content_extractor)
    create_literature = CreateLiteratureStep(literature_repo)
    finalize_guide = FinalizeGuideStep(literature_repo, classification)
    mark_failed = MarkFailedStep(literature_repo)

    guide = GuidePipeline(
        save_file=save_file,
        extract_content=extract_content,
        create_literature=create_literature,
        reload_guide=ReloadGuideStep(literature_repo),
        finalize_guide=finalize_guide,
        mark_failed=mark_failed,
        ai_service=ai_service,
        literature_repo=literature_repo,
    )
    batch = BatchImportPipeline(
        save_file=save_file,
        extract_content=extract_content,
        create_literature=create_literature,
        generate_guide=GenerateGuideStep(ai_service),
        finalize_guide=finalize_guide,
        mark_failed=mark_failed,
        executor=executor,
    )
    return Pipelines(guide=guide, batch=batch, executor=executor)
