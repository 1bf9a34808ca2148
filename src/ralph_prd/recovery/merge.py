"""Forward completion flags from a corrupted rewrite onto a trusted baseline.

A corrupted rewrite is not trusted for structure or wording, but its claim
that a task is finished usually is. The merge therefore only ever flips
``passes`` from false to true on entries that already exist in the baseline.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ralph_prd.constants import MIN_WORD_LENGTH, SIMILARITY_THRESHOLD, WARNING_PREVIEW_CHARS
from ralph_prd.domain.models import MergeResult, PrdEntry
from ralph_prd.domain.values import as_mapping
from ralph_prd.recovery.extractor import extract_items

logger = logging.getLogger(__name__)


def smart_merge(
    baseline: Iterable[PrdEntry | Mapping[str, object]],
    corrupted: object,
) -> MergeResult:
    """Apply positive completion claims from ``corrupted`` to a copy of ``baseline``.

    Entries are never added, removed, reordered, or reset to ``passes=False``.
    """

    merged = [_copy_entry(entry) for entry in baseline]
    claims = [item for item in extract_items(corrupted) if item.passes]
    updated = 0
    warnings: list[str] = []

    for claim in claims:
        target = find_best_match(merged, claim.description)
        if target is None:
            preview = claim.description[:WARNING_PREVIEW_CHARS]
            warnings.append(f'Could not match item: "{preview}..."')
            continue
        if not target.passes:
            target.passes = True
            updated += 1

    logger.debug(
        "merged %d completion claim(s): %d updated, %d unmatched",
        len(claims),
        updated,
        len(warnings),
    )
    return MergeResult(merged=merged, items_updated=updated, warnings=tuple(warnings))


def find_best_match(entries: Iterable[PrdEntry], description: str) -> PrdEntry | None:
    """Find the entry whose description best matches ``description``.

    A substring match in either direction wins immediately; otherwise the
    highest word similarity above the threshold is returned.
    """

    best: PrdEntry | None = None
    best_score = 0.0

    for entry in entries:
        if entry.description in description or description in entry.description:
            return entry

        score = similarity(entry.description, description)
        if score > best_score and score > SIMILARITY_THRESHOLD:
            best = entry
            best_score = score

    return best


def similarity(left: str, right: str) -> float:
    """Jaccard index over lower-cased words of at least three characters."""

    left_words = _word_set(left)
    right_words = _word_set(right)
    if not left_words or not right_words:
        return 0.0
    return len(left_words & right_words) / len(left_words | right_words)


def _word_set(text: str) -> set[str]:
    return {word for word in text.lower().split() if len(word) >= MIN_WORD_LENGTH}


def _copy_entry(entry: PrdEntry | Mapping[str, object]) -> PrdEntry:
    if isinstance(entry, PrdEntry):
        return entry.copy()
    if as_mapping(entry) is None:
        raise TypeError(
            f"baseline entries must be PrdEntry or mappings, got {type(entry).__name__}"
        )
    return PrdEntry.from_dict(entry)


__all__ = ["find_best_match", "similarity", "smart_merge"]
