"""End-to-end ingestion pipeline: read -> normalize -> chunk -> classify -> store."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from coaching_knowledge.errors import ConfigurationError, TranscriptReadError
from coaching_knowledge.ingestion.chunking import build_chunks, chunk_text
from coaching_knowledge.ingestion.models import (
    IngestedFile,
    IngestionReport,
    SourceFormat,
    Transcript,
)
from coaching_knowledge.ingestion.parsers import normalize_transcript, source_format_for
from coaching_knowledge.ingestion.storage import (
    get_supabase_client,
    reset_transcripts,
    store_transcript,
)
from coaching_knowledge.pipeline_config import IngestionConfig
from coaching_knowledge.topics import TopicClassifier, infer_topics_from_title

if TYPE_CHECKING:
    from supabase import Client

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset({".txt", ".md", ".srt", ".vtt"})

_TITLE_SEPARATORS_RE = re.compile(r"[_-]")


def collect_transcript_files(root: Path) -> list[Path]:
    """Recursively list supported transcript files under *root*, sorted by path."""
    return sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def title_from_filename(file_name: str) -> str:
    """``"finanz_check-q1.txt"`` -> ``"finanz check q1"``."""
    stem = Path(file_name).stem
    return _TITLE_SEPARATORS_RE.sub(" ", stem).strip() or stem


def prepare_document(
    content: str,
    source_format: SourceFormat,
    config: IngestionConfig,
) -> list[str]:
    """Normalize and chunk raw transcript text."""
    normalized = normalize_transcript(content, source_format)
    return chunk_text(normalized, max_chars=config.max_chars, overlap=config.overlap)


def ingest_document(
    client: Client,
    content: str,
    file_name: str,
    config: IngestionConfig,
    source_path: str | None = None,
    classify: TopicClassifier = infer_topics_from_title,
) -> IngestedFile | None:
    """Ingest one in-memory transcript.

    Args:
        client: Supabase client used for the write.
        content: Raw transcript text.
        file_name: Original file name; drives title, format and metadata.
        config: Chunking configuration.
        source_path: Filesystem path for traceability, if any.
        classify: Strategy deriving topics from the title.

    Returns:
        The stored transcript's summary, or ``None`` when the text yields no
        chunks (nothing is written in that case).
    """
    contents = prepare_document(content, source_format_for(file_name), config)
    if not contents:
        return None

    title = title_from_filename(file_name)
    transcript = Transcript(
        title=title,
        source_path=source_path,
        topics=classify(title),
        metadata={"file_name": Path(file_name).name},
    )
    # Indices are fixed here, before the write
    chunks = build_chunks(contents)
    transcript_id = store_transcript(client, transcript, chunks)

    return IngestedFile(
        path=source_path or file_name,
        transcript_id=transcript_id,
        title=title,
        num_chunks=len(chunks),
        topics=transcript.topics,
    )


def _read_transcript_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Transcript is not valid UTF-8 text: {path}"
        raise TranscriptReadError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read transcript {path}: {exc}"
        raise TranscriptReadError(msg) from exc


def ingest_directory(
    root: str | Path | None,
    config: IngestionConfig | None = None,
    client: Client | None = None,
    classify: TopicClassifier = infer_topics_from_title,
) -> IngestionReport:
    """Import every supported transcript file below *root*.

    Files are processed in sorted path order. Any configuration or read error
    aborts the run; transcripts written before the failure stay intact.

    Raises:
        ConfigurationError: *root* unset or missing, or no supported files.
        TranscriptReadError: A file is unreadable or not UTF-8.
    """
    if not root:
        raise ConfigurationError("TRANSCRIPT_DIR is not set")

    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise ConfigurationError(f"Transcript directory not found: {root_path}")

    files = collect_transcript_files(root_path)
    if not files:
        raise ConfigurationError(f"No transcript files found in {root_path}")

    config = config or IngestionConfig()
    client = client or get_supabase_client()
    report = IngestionReport(files_found=len(files))

    if config.reset:
        logger.info("Removing all existing transcripts before import")
        reset_transcripts(client)

    for path in files:
        content = _read_transcript_file(path)
        ingested = ingest_document(
            client,
            content,
            path.name,
            config,
            source_path=str(path),
            classify=classify,
        )
        if ingested is None:
            logger.info("Skipped %s -- no text after normalization", path)
            report.skipped.append(str(path))
            continue

        report.ingested.append(ingested)
        logger.info("Imported %s (%d chunks)", path, ingested.num_chunks)

    logger.info(
        "Import finished: %d of %d files, %d chunks, %d skipped",
        report.files_processed,
        report.files_found,
        report.chunks_created,
        len(report.skipped),
    )
    return report
