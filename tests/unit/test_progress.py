"""Tests for the progress meter."""

from __future__ import annotations

import threading

import pytest

from plcconsole.console.progress import IDLE, ProgressMeter
from plcconsole.device.models import ProgressAction, ProgressEvent


def _feed(meter: ProgressMeter, action: ProgressAction, indices) -> None:
    for i in indices:
        meter(ProgressEvent(action, i))


def test_dot_every_five_percent(console_io):
    io, out = console_io("")
    meter = ProgressMeter(io)
    _feed(meter, ProgressAction.DOWNLOADING, range(0, 41))
    _feed(meter, ProgressAction.UPDATING, range(41, 101))
    assert out.getvalue() == "." * 21
    assert meter.cursor == 100


def test_duplicate_indices_are_ignored(console_io):
    io, out = console_io("")
    meter = ProgressMeter(io)
    _feed(meter, ProgressAction.PROCESSING, [5, 5, 5, 6, 6])
    assert out.getvalue() == "."


@pytest.mark.parametrize("action", [ProgressAction.STARTING, ProgressAction.FINISHED])
def test_uncounted_actions_do_nothing(console_io, action):
    io, out = console_io("")
    meter = ProgressMeter(io)
    _feed(meter, action, [0, 100])
    assert out.getvalue() == ""
    assert meter.cursor == IDLE


def test_custom_step_and_reset(console_io):
    io, out = console_io("")
    meter = ProgressMeter(io, step=50)
    _feed(meter, ProgressAction.REBOOTING, range(0, 101))
    assert out.getvalue() == "..."

    meter.reset()
    assert meter.cursor == IDLE
    meter(ProgressEvent(ProgressAction.REBOOTING, 100))
    assert out.getvalue() == "...."


def test_events_from_another_thread(console_io):
    io, out = console_io("")
    meter = ProgressMeter(io, step=10)
    worker = threading.Thread(
        target=_feed, args=(meter, ProgressAction.UPDATING, range(0, 101))
    )
    worker.start()
    worker.join(timeout=5)
    assert out.getvalue() == "." * 11
