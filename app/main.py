import argparse
import sys
from pathlib import Path

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log
from app.pipeline.builder import build_pipelines
from app.pipeline.classification import wait_for_background_threads
from app.storage.models import UploadedFile


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="literature-guide",
        description="Generate reading guides for documents and print the event stream.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="PDF, DOCX, Markdown or text files")
    parser.add_argument(
        "--batch",
        action="store_true",
        help="import all files as one batch (default when more than one file is given)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: initialize pool -> build pipelines -> stream events to stdout."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    try:
        uploads = [
            UploadedFile(filename=path.name, content=path.read_bytes()) for path in args.files
        ]
    except OSError as exc:
        Log.error(f"Cannot read input file: {exc}")
        return 1

    init_pool(settings)
    pipelines = build_pipelines(settings)
    failed = False
    try:
        if args.batch or len(uploads) > 1:
            stream = pipelines.batch.run(uploads)
        else:
            stream = pipelines.guide.generate(uploads[0])
        for event in stream:
            failed = failed or event.is_failure
            sys.stdout.write(event.to_sse())
            sys.stdout.flush()
    except KeyboardInterrupt:
        Log.info("Interrupted, shutting down")
        failed = True
    finally:
        pipelines.executor.shutdown(wait=True, cancel_futures=True)
        wait_for_background_threads(settings.llm_timeout_seconds)
        close_pool()
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
