"""Progress reporting for long-running simulations and tests.

Progress is an optional side channel: callers pass a callable that receives a
`ProgressEvent` per iteration. Every event is also logged, so that scripts
can watch progress through standard logging configuration alone. Reporting
never changes results.

Examples
--------
>>> from trackway.progress import ProgressEvent
>>> events = []
>>> callback = events.append  # any Callable[[ProgressEvent], None]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

import pandas as pd

__all__ = ["ProgressCallback", "ProgressEvent", "report_progress"]

Stage = Literal["simulation", "permutation", "metric", "completed"]


@dataclass(frozen=True)
class ProgressEvent:
    """One progress notice.

    Attributes
    ----------
    stage : {"simulation", "permutation", "metric", "completed"}
        What is being iterated. ``"completed"`` is sent once when a test
        finishes.
    iteration : int
        1-based iteration index.
    total : int
        Number of iterations in this stage.
    description : str
        Short label of the computation (e.g. ``"DTW metric"``).
    matrix : pandas.DataFrame or None
        The iteration's metric matrix, for ``"metric"`` events.
    timestamp : datetime
        Wall-clock time the event was created.
    """

    stage: Stage
    iteration: int
    total: int
    description: str = ""
    matrix: pd.DataFrame | None = None
    timestamp: datetime = field(default_factory=datetime.now)


ProgressCallback = Callable[[ProgressEvent], None]


def report_progress(
    callback: ProgressCallback | None,
    logger: logging.Logger,
    event: ProgressEvent,
) -> None:
    """Log `event` and forward it to `callback` if one was given."""
    if event.stage == "completed":
        logger.info("%s: analysis completed (%d iterations)", event.description, event.total)
    else:
        logger.info(
            "%s: %s %d/%d", event.description, event.stage, event.iteration, event.total
        )
        if event.matrix is not None and logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s iteration %d:\n%s", event.description, event.iteration, event.matrix)
    if callback is not None:
        callback(event)
