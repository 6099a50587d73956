from __future__ import annotations

import logging
import random
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DecisionLogger:
    """
    Sampled debug logging for ability decisions.

    Ability checks sit on the hot path of every request, so nothing is written
    unless `sample_rate` is above zero and the logger is enabled for DEBUG.
    """

    def __init__(self, sample_rate: float = 0.0, rng: Callable[[], float] = random.random) -> None:
        self.sample_rate = min(max(sample_rate, 0.0), 1.0)
        self._rng = rng

    def record(self, actor_id: int | None, action: str, resource: str, allowed: bool, reason: str) -> None:
        if self.sample_rate <= 0.0 or not logger.isEnabledFor(logging.DEBUG):
            return
        if self.sample_rate < 1.0 and self._rng() >= self.sample_rate:
            return
        logger.debug(
            "authz decision actor=%s action=%s resource=%s allowed=%s reason=%s",
            actor_id,
            action,
            resource,
            allowed,
            reason,
        )


_default = DecisionLogger()


def get_decision_logger() -> DecisionLogger:
    return _default


def configure_decision_logging(sample_rate: float) -> None:
    _default.sample_rate = min(max(sample_rate, 0.0), 1.0)
