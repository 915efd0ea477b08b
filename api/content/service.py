"""
Batch content generation.

By default the first failing record stops the run and its error propagates.
With `continue_on_error=True` every record is attempted and failures are
collected into the report instead.

Stored rows can be passed together with a `decode` callable; a row that
fails to decode counts as a failed record under its row id.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from core.errors import ContentError

from .projector import ContentProjector, ProjectionResult
from .records import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationFailure:
    record_id: int
    error: ContentError


@dataclass
class GenerationReport:
    record_type: str
    generated: list[ProjectionResult] = field(default_factory=list)
    failed: list[GenerationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def generate_content(
    records: Iterable[Any],
    record_type: str,
    projector: ContentProjector,
    *,
    decode: Callable[[Any], Record] | None = None,
    continue_on_error: bool = False,
) -> GenerationReport:
    report = GenerationReport(record_type=record_type)

    for item in records:
        record_id = item.id if decode is None else int(item["id"])
        try:
            record = item if decode is None else decode(item)
            report.generated.append(projector.materialize(record, record_type))
        except ContentError as e:
            if not continue_on_error:
                raise
            logger.warning("content_failed type=%s id=%s error=%s", record_type, record_id, e)
            report.failed.append(GenerationFailure(record_id=record_id, error=e))

    logger.info(
        "content_batch_complete type=%s generated=%s failed=%s",
        record_type,
        len(report.generated),
        len(report.failed),
    )
    return report
