"""
Structure-aware segmenters.

Split documents along Markdown headings and speaker turns, and keep list or
table runs intact while accumulating to a target size. When no structure is
found, or the caller's structural parameters are unusable, the whole document
becomes a single chunk whose ``source`` explains why.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from ....exceptions import ConfigurationError, PatternError
from ..boundary import TextSpan, line_body, line_number, split_lines, trim_span
from ..result import Chunk
from .base import ChunkCollector, whole_document

logger = logging.getLogger(__name__)

ATX_HEADER_PATTERN = re.compile(r"^ {0,3}(#{1,6})(?=[ \t]|$)(.*)$")
CODE_FENCE_PATTERN = re.compile(r"^ {0,3}(```|~~~)")
DEFAULT_SPEAKER_PATTERN = r"^\s*([A-Z][\w .'-]{0,40}?)\s*:\s+"

BULLET_ITEM_PATTERN = re.compile(r"^\s*[•\-*+]\s+\S")
NUMBERED_ITEM_PATTERN = re.compile(r"^\s*\d{1,9}[.)]\s+\S")
LIST_CONTINUATION_PATTERN = re.compile(r"^(?:\s*$|(?: {2,}|\t)\S)")
PIPE_SEPARATOR_PATTERN = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)+\|?\s*$")
TSV_PATTERN = re.compile(r"\S\t+\S")

MAX_CSV_FIELD_WORDS = 4
MAX_CSV_FIELD_LENGTH = 40


def parse_heading_levels(heading_levels: str) -> Set[int]:
    """
    Parse a comma-separated list of heading levels.

    Tokens that are not integers between 1 and 6 are ignored.

    Raises:
        ConfigurationError: If no valid level remains
    """
    levels = set()
    for token in heading_levels.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            level = int(token)
        except ValueError:
            logger.debug(f"Ignoring non-numeric heading level '{token}'")
            continue
        if 1 <= level <= 6:
            levels.add(level)
        else:
            logger.debug(f"Ignoring heading level {level} outside 1-6")

    if not levels:
        raise ConfigurationError(
            f"No valid heading levels in '{heading_levels}'",
            parameter="heading_levels"
        )
    return levels


def chunk_heading(text: str, heading_levels: str) -> List[Chunk]:
    """
    Split a Markdown document into one chunk per heading section.

    A section runs from a heading line of a selected level up to the next one.
    Text before the first heading forms a ``preamble`` chunk. Lines inside
    fenced code blocks are never treated as headings.
    """
    try:
        levels = parse_heading_levels(heading_levels)
    except ConfigurationError as e:
        logger.warning(f"Heading chunking degraded: {e.message}")
        return whole_document(text, "heading", "no valid heading levels - treated as single chunk")

    collector = ChunkCollector("heading")
    section_start = 0
    section_source = "preamble"
    found = False
    in_fence = False

    for line in split_lines(text):
        body = line_body(line)
        if CODE_FENCE_PATTERN.match(body):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        match = ATX_HEADER_PATTERN.match(body)
        if not match or len(match.group(1)) not in levels:
            continue

        found = True
        collector.add_slice(text, section_start, line.start, source=section_source)
        title = match.group(2).strip().rstrip("#").strip()
        section_start = line.start
        section_source = f"h{len(match.group(1))}: {title}"

    if not found:
        return whole_document(text, "heading", "no headers found - treated as single chunk")

    collector.add_slice(text, section_start, len(text), source=section_source)
    return collector.chunks


def compile_speaker_pattern(speaker_pattern: Optional[str]) -> re.Pattern:
    """
    Compile a speaker pattern; the first capture group names the speaker.

    Raises:
        PatternError: If the pattern does not compile or has no capture group
    """
    pattern = speaker_pattern or DEFAULT_SPEAKER_PATTERN
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise PatternError(f"Invalid speaker pattern: {e}", pattern=pattern)

    if compiled.groups < 1:
        raise PatternError("Speaker pattern must contain a capture group", pattern=pattern)
    return compiled


def chunk_dialogue(text: str, speaker_pattern: Optional[str] = None) -> List[Chunk]:
    """
    Split a transcript into one chunk per speaker turn.

    A turn starts at a line whose speaker differs from the current one and
    runs until the next change of speaker, so consecutive lines from the same
    speaker stay together.
    """
    try:
        pattern = compile_speaker_pattern(speaker_pattern)
    except PatternError as e:
        logger.warning(f"Dialogue chunking degraded: {e.message}")
        return whole_document(text, "dialogue", "invalid speaker pattern - treated as single chunk")

    collector = ChunkCollector("dialogue")
    turn_start = 0
    speaker: Optional[str] = None
    found = False

    def flush(end: int) -> None:
        span = trim_span(text, turn_start, end)
        if span is None:
            return
        lines = f"lines {line_number(text, span.start)}-{line_number(text, span.end - 1)}"
        label = speaker if speaker is not None else "unattributed"
        collector.add_span(span, source=f"{label} ({lines})")

    for line in split_lines(text):
        match = pattern.match(line.text)
        name = (match.group(1) or "").strip() if match else ""
        if not name or name == speaker:
            continue

        found = True
        flush(line.start)
        turn_start = line.start
        speaker = name

    if not found:
        return whole_document(text, "dialogue", "no speakers detected - treated as single chunk")

    flush(len(text))
    return collector.chunks


@dataclass(frozen=True)
class RunDetector:
    """Recognises the lines of an atomic run (list items, table rows)."""

    label: str
    strategy: str
    is_run_line: Callable[[str], bool]
    continues_run: Callable[[str], bool]


def is_list_line(line: str) -> bool:
    return bool(BULLET_ITEM_PATTERN.match(line) or NUMBERED_ITEM_PATTERN.match(line))


def is_list_continuation(line: str) -> bool:
    return bool(LIST_CONTINUATION_PATTERN.match(line))


def is_csv_line(line: str) -> bool:
    """At least three short comma-separated fields, not ending like a sentence."""
    stripped = line.strip()
    if not stripped or stripped[-1] in ".!?":
        return False
    cells = stripped.split(",")
    if len(cells) < 3:
        return False
    return all(
        len(cell.strip()) <= MAX_CSV_FIELD_LENGTH and len(cell.split()) <= MAX_CSV_FIELD_WORDS
        for cell in cells
    )


def is_table_line(line: str) -> bool:
    """Markdown pipe rows and separators, CSV-like or TSV-like lines."""
    stripped = line.strip()
    if not stripped:
        return False
    if PIPE_SEPARATOR_PATTERN.match(stripped) or stripped.count("|") >= 2:
        return True
    return bool(TSV_PATTERN.search(stripped)) or is_csv_line(stripped)


LIST_RUNS = RunDetector(
    label="list items",
    strategy="list",
    is_run_line=is_list_line,
    continues_run=is_list_continuation,
)

TABLE_RUNS = RunDetector(
    label="table rows",
    strategy="table",
    is_run_line=is_table_line,
    continues_run=lambda line: not line.strip(),
)


class _RunAwareAccumulator:
    """
    Accumulates contiguous lines into chunks of roughly ``target_size``.

    Ordinary lines are appended one by one. A run is collected whole and
    folded into the current chunk when it closes; if it does not fit, the
    current chunk is flushed first, so a run never straddles two chunks.
    """

    def __init__(self, text: str, target_size: int, detector: RunDetector) -> None:
        self.text = text
        self.target_size = target_size
        self.detector = detector
        self.collector = ChunkCollector(detector.strategy)
        self.chunk_start: Optional[int] = None
        self.chunk_end = 0
        self.chunk_items = 0
        self.run_start: Optional[int] = None
        self.run_end = 0
        self.run_items = 0
        self.runs_found = 0

    def _has_content(self) -> bool:
        return self.chunk_start is not None and bool(self.text[self.chunk_start:self.chunk_end].strip())

    def _flush(self) -> None:
        if self.chunk_start is not None:
            source = f"{self.chunk_items} {self.detector.label}" if self.chunk_items else None
            self.collector.add_slice(self.text, self.chunk_start, self.chunk_end, source=source)
        self.chunk_start = None
        self.chunk_items = 0

    def _append(self, start: int, end: int, length: int) -> None:
        if self._has_content() and (self.chunk_end - self.chunk_start) + length > self.target_size:
            self._flush()
        if self.chunk_start is None:
            self.chunk_start = start
        self.chunk_end = end

    def _close_run(self) -> None:
        if self.run_start is None:
            return
        self._append(self.run_start, self.run_end, self.run_end - self.run_start)
        self.chunk_items += self.run_items
        self.runs_found += 1
        self.run_start = None
        self.run_items = 0

    def feed(self, line: TextSpan) -> None:
        body = line_body(line)
        if self.detector.is_run_line(body):
            if self.run_start is None:
                self.run_start = line.start
            self.run_items += 1
            self.run_end = line.end
            return

        if self.run_start is not None and self.detector.continues_run(body):
            self.run_end = line.end
            return

        self._close_run()
        self._append(line.start, line.end, len(line))

    def finish(self) -> List[Chunk]:
        self._close_run()
        self._flush()
        return self.collector.chunks


def chunk_runs(text: str, target_size: int, detector: RunDetector) -> List[Chunk]:
    accumulator = _RunAwareAccumulator(text, target_size, detector)
    for line in split_lines(text):
        accumulator.feed(line)
    chunks = accumulator.finish()

    if accumulator.runs_found == 0:
        kind = detector.label.split()[0]
        return whole_document(text, detector.strategy, f"no {kind}s detected - treated as single chunk")
    return chunks


def chunk_list(text: str, target_size: int) -> List[Chunk]:
    return chunk_runs(text, target_size, LIST_RUNS)


def chunk_table(text: str, target_size: int) -> List[Chunk]:
    return chunk_runs(text, target_size, TABLE_RUNS)
