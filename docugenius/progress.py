"""Progress event plumbing shared by pipeline stages."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from .logging import get_logger
from .models import ProgressEvent, ProgressKind

ProgressCallback = Callable[[ProgressEvent], None]

logger = get_logger("progress")


class ProgressReporter:
    """Forwards events to a sink while keeping progress monotonic within a run.

    A value lower than one already reported is raised to the running maximum.
    Exceptions raised by the sink are logged and never interrupt the pipeline.
    """

    def __init__(self, sink: Optional[ProgressCallback] = None) -> None:
        self._sink = sink
        self._last = 0.0

    @property
    def last_progress(self) -> float:
        return self._last

    def emit(
        self,
        kind: ProgressKind,
        message: str,
        progress: float,
        *,
        stage: str | None = None,
        data: Dict[str, Any] | None = None,
    ) -> ProgressEvent:
        value = max(self._last, min(100.0, round(float(progress), 2)))
        self._last = value
        event = ProgressEvent(kind=kind, message=message, progress=value, stage=stage, data=data)
        self.forward(event)
        return event

    def forward(self, event: ProgressEvent) -> None:
        if event.progress < self._last:
            event = ProgressEvent(
                kind=event.kind,
                message=event.message,
                progress=self._last,
                stage=event.stage,
                data=event.data,
            )
        self._last = event.progress
        if self._sink is None:
            return
        try:
            self._sink(event)
        except Exception:
            logger.exception("Progress sink raised while handling %s event", event.kind)


__all__ = ["ProgressCallback", "ProgressReporter"]
