from __future__ import annotations

import logging

from rcpu.models import UtilizationSample

logger = logging.getLogger(__name__)


class LogSink:
    """Writes one INFO line per sample."""

    async def handle_sample(self, sample: UtilizationSample) -> None:
        logger.info(
            "avg usage %.2f%% | adjusted usage %.2f%% | avg remaining %.2f%% | RCPU %.2f%% | diff %.2f%%",
            sample.naive_usage_percent,
            sample.adjusted_usage_percent,
            sample.naive_remaining_percent,
            sample.adjusted_remaining_percent,
            sample.difference_percent,
        )
