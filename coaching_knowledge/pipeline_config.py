"""Pipeline configuration: the IngestionConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from coaching_knowledge.errors import ConfigurationError

if TYPE_CHECKING:
    from coaching_knowledge.config import Settings


@dataclass(frozen=True)
class IngestionConfig:
    """Immutable configuration for a transcript import run.

    ``overlap`` must stay strictly below ``max_chars`` so every chunk moves
    the cursor forward.
    """

    max_chars: int = 1200
    overlap: int = 200
    reset: bool = False

    def __post_init__(self) -> None:
        if self.max_chars <= 0:
            msg = f"Chunk size must be positive, got {self.max_chars}"
            raise ConfigurationError(msg)
        if not 0 <= self.overlap < self.max_chars:
            msg = (
                f"Chunk overlap must be between 0 and chunk size - 1 "
                f"(chunk size {self.max_chars}, overlap {self.overlap})"
            )
            raise ConfigurationError(msg)

    @classmethod
    def from_settings(cls, settings: Settings) -> IngestionConfig:
        return cls(
            max_chars=settings.transcript_chunk_size,
            overlap=settings.transcript_chunk_overlap,
            reset=settings.reset_transcripts,
        )
