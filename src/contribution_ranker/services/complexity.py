"""Per-file complexity scoring.

Combines three structural signals into one bounded score::

    raw   = 0.4 * norm(cyclomatic) + 0.3 * norm(nesting) + 0.3 * size_penalty(loc)
    score = clamp(100 * raw, 0, 100)

Tests, generated artefacts, configuration and docs are excluded entirely.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Sequence

from contribution_ranker.domain.cancellation import CancellationToken
from contribution_ranker.domain.entities import ComplexityResult, FileCategory, FileNode
from contribution_ranker.services.file_filter import classify, is_rankable
from contribution_ranker.services.scoring import clamp, ratio

logger = logging.getLogger(__name__)

# ── Weight constants ────────────────────────────────────────────────────────

_W_CYCLOMATIC = 0.4
_W_NESTING = 0.3
_W_SIZE = 0.3

CYCLOMATIC_CEILING = 20
NESTING_CEILING = 6
SIZE_THRESHOLD = 500
SIZE_PENALTY_SPAN = 1500
BATCH_SIZE = 64


def aggregate_metrics(node: FileNode) -> tuple[int, int]:
    """Return ``(cyclomatic, nesting)`` for the file.

    The most complex function dominates: per-function values are combined
    by maximum, never averaged.
    """
    cyclomatic = max([node.cyclomatic, *(f.cyclomatic for f in node.functions)])
    nesting = max([node.nesting_depth, *(f.nesting_depth for f in node.functions)])
    return max(cyclomatic, 0), max(nesting, 0)


def size_penalty(
    lines_of_code: int,
    threshold: int = SIZE_THRESHOLD,
    span: int = SIZE_PENALTY_SPAN,
) -> float:
    """0 up to *threshold* lines, then linear up to 1.0 at ``threshold + span``."""
    if lines_of_code <= threshold:
        return 0.0
    return ratio(lines_of_code - threshold, span)


def score_file(
    node: FileNode,
    cyclomatic_ceiling: int = CYCLOMATIC_CEILING,
    nesting_ceiling: int = NESTING_CEILING,
    size_threshold: int = SIZE_THRESHOLD,
    size_span: int = SIZE_PENALTY_SPAN,
) -> float:
    """Complexity score in [0, 100] for a single file."""
    cyclomatic, nesting = aggregate_metrics(node)
    raw = (
        _W_CYCLOMATIC * ratio(cyclomatic, cyclomatic_ceiling)
        + _W_NESTING * ratio(nesting, nesting_ceiling)
        + _W_SIZE * size_penalty(node.lines_of_code, size_threshold, size_span)
    )
    return clamp(100.0 * raw, 0.0, 100.0)


def compute_complexity(
    files: Sequence[FileNode],
    batch_size: int = BATCH_SIZE,
    cyclomatic_ceiling: int = CYCLOMATIC_CEILING,
    nesting_ceiling: int = NESTING_CEILING,
    size_threshold: int = SIZE_THRESHOLD,
    size_span: int = SIZE_PENALTY_SPAN,
    cancel: CancellationToken | None = None,
) -> ComplexityResult:
    """Score every rankable file, batch by batch.

    Cancellation is checked before each batch; whatever was scored up to
    the last completed batch is returned with ``cancelled=True``.
    """
    ordered = sorted(files, key=lambda f: f.path)
    batch_size = max(batch_size, 1)

    scores: dict[str, float] = {}
    excluded: dict[str, FileCategory] = {}
    batches = 0
    cancelled = False

    for start in range(0, len(ordered), batch_size):
        if cancel is not None and cancel.cancelled:
            cancelled = True
            break
        for node in ordered[start : start + batch_size]:
            category = classify(node.path)
            if not is_rankable(category):
                excluded[node.path] = category
                continue
            scores[node.path] = score_file(
                node, cyclomatic_ceiling, nesting_ceiling, size_threshold, size_span
            )
        batches += 1

    if cancelled:
        logger.info(
            "Complexity cancelled after %d batch(es); %d file(s) scored",
            batches,
            len(scores),
        )
    logger.debug("Scored %d file(s), excluded %d", len(scores), len(excluded))

    return ComplexityResult(
        scores=MappingProxyType(scores),
        excluded=MappingProxyType(excluded),
        batches_completed=batches,
        cancelled=cancelled,
    )
