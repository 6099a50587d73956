from __future__ import annotations

import logging

from shiftdesk.security.diagnostics import DecisionLogger

LOGGER = "shiftdesk.security.diagnostics"


def test_disabled_by_default(caplog):
    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        DecisionLogger().record(1, "view", "shift", True, "policy")

    assert caplog.records == []


def test_nothing_written_above_debug(caplog):
    with caplog.at_level(logging.INFO, logger=LOGGER):
        DecisionLogger(sample_rate=1.0).record(1, "view", "shift", True, "policy")

    assert caplog.records == []


def test_sampling_uses_rng(caplog):
    draws = iter([0.1, 0.9, 0.2])
    sink = DecisionLogger(sample_rate=0.5, rng=lambda: next(draws))

    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        for _ in range(3):
            sink.record(1, "view", "shift", False, "policy")

    assert len(caplog.records) == 2


def test_rate_is_clamped():
    assert DecisionLogger(sample_rate=5).sample_rate == 1.0
    assert DecisionLogger(sample_rate=-1).sample_rate == 0.0
