"""Subtitle processing models - SRT blocks, raw chunks, ranges and run results."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

# In-band marker the model embeds in a block it is not confident about
CONTEXT_RISK_MARKER = "[⚠ POSSIBLE CONTEXT ERROR - REGENERATE THIS BLOCK]"
CONTEXT_RISK_PATTERNS = ("POSSIBLE CONTEXT ERROR", "POSSÍVEL ERRO")


def has_context_risk(text: str) -> bool:
    """Return True if the text carries a low-confidence marker."""
    return any(pattern in text for pattern in CONTEXT_RISK_PATTERNS)


class BlockIssue(str, Enum):
    """Why a block's current text is considered unreliable."""

    CONTEXT_RISK = "context_risk"
    MISSING_FROM_RESPONSE = "missing_from_response"
    BATCH_FAILED = "batch_failed"
    LENGTH_DRIFT = "length_drift"


@dataclass
class SubtitleBlock:
    """Single SRT record."""

    id: int  # display index, unique within a document
    start_time: str  # HH:MM:SS,mmm
    end_time: str  # HH:MM:SS,mmm
    text: str
    original_text: str = ""  # snapshot taken at parse time, display only
    is_error: bool = False
    issue: BlockIssue | None = None

    @property
    def needs_attention(self) -> bool:
        return self.is_error or has_context_risk(self.text)

    def mark_error(self, issue: BlockIssue) -> None:
        self.is_error = True
        self.issue = issue

    def clear_error(self) -> None:
        self.is_error = False
        self.issue = None


@dataclass(frozen=True)
class RawChunk:
    """Paragraph-aligned slice of unstructured input text."""

    index: int  # 0-based position in the chunk list
    text: str
    separator: str = ""  # exact text that followed this chunk in the input

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class BlockRange:
    """Inclusive 1-based window over chunks or blocks."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class ParseResult:
    """Blocks parsed from subtitle text plus any fragments that were discarded."""

    blocks: list[SubtitleBlock] = field(default_factory=list)
    remainder: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.remainder

    def raise_for_remainder(self) -> None:
        """Raise SubtitleParseError if anything could not be parsed."""
        if self.remainder:
            from srtstudio.exceptions import SubtitleParseError

            raise SubtitleParseError(
                f"{len(self.remainder)} fragment(s) could not be parsed as SRT blocks",
                remainder=self.remainder,
            )


class RunStatus(str, Enum):
    """Batch run state."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunProgress:
    """Units processed so far out of the units selected for a run."""

    current: int = 0
    total: int = 0

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 0.0


class RedundancyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmotionLevel(str, Enum):
    NEUTRAL = "neutral"
    MODERATE = "moderate"
    HIGH = "high"


class HumorLevel(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    SARCASTIC = "sarcastic"


class Pacing(str, Enum):
    SLOW = "slow"
    BALANCED = "balanced"
    DYNAMIC = "dynamic"


class EnhancementParams(BaseModel):
    """Style controls for a batch rewrite. Never affects document structure."""

    model_config = ConfigDict(frozen=True)

    redundancy: RedundancyLevel = RedundancyLevel.MEDIUM
    emotion: EmotionLevel = EmotionLevel.NEUTRAL
    humor: HumorLevel = HumorLevel.NONE
    pacing: Pacing = Pacing.BALANCED
    character_substitution: str = ""


@dataclass
class ReconciliationResult:
    """Outcome of merging one enhancement response back into its sub-batch."""

    updated_ids: list[int] = field(default_factory=list)
    missing_ids: list[int] = field(default_factory=list)
    drifted_ids: list[int] = field(default_factory=list)
    flagged_ids: list[int] = field(default_factory=list)  # model set the risk marker
    unexpected_ids: list[int] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(set(self.missing_ids) | set(self.drifted_ids) | set(self.flagged_ids))


@dataclass
class CorrectionRunResult:
    """Outcome of one correction run."""

    status: RunStatus
    blocks: list[SubtitleBlock]
    processed_chunks: int = 0
    error: str | None = None
    next_range: BlockRange | None = None


@dataclass
class EnhancementRunResult:
    """Outcome of one enhancement run."""

    status: RunStatus
    blocks: list[SubtitleBlock]
    processed_blocks: int = 0
    error_count: int = 0
    failed_batches: int = 0
