"""Exception types shared by ingestion and retrieval."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for errors that abort a transcript import run."""


class ConfigurationError(IngestionError):
    """Missing or invalid configuration (directory, chunking, credentials)."""


class TranscriptReadError(IngestionError):
    """A source file could not be read as UTF-8 text."""


class SearchUnavailableError(Exception):
    """The backing full-text search could not be queried.

    Distinct from an empty result: callers should report the knowledge base
    as unavailable instead of "nothing relevant found".
    """
