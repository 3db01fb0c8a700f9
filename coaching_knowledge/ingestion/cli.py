"""Command-line entry point for the transcript import.

Configuration comes from the environment (or ``.env``)::

    TRANSCRIPT_DIR=./calls TRANSCRIPT_CHUNK_SIZE=1200 RESET_TRANSCRIPTS=true import-transcripts

Exit code 0 on success, 1 on any fatal error.
"""

from __future__ import annotations

import logging
import sys

from coaching_knowledge.config import Settings, settings
from coaching_knowledge.errors import IngestionError
from coaching_knowledge.ingestion.pipeline import ingest_directory
from coaching_knowledge.pipeline_config import IngestionConfig

logger = logging.getLogger(__name__)


def run(app_settings: Settings = settings) -> int:
    """Run one import with *app_settings*; return the process exit code."""
    try:
        config = IngestionConfig.from_settings(app_settings)
        report = ingest_directory(app_settings.transcript_dir, config)
    except IngestionError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:
        logger.exception("Transcript import failed")
        return 1

    print(
        f"Done! Imported {report.files_processed} transcripts "
        f"({report.chunks_created} chunks), skipped {len(report.skipped)}."
    )
    return 0


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run())


if __name__ == "__main__":
    main()
