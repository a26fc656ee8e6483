from __future__ import annotations

from itertools import count
from types import SimpleNamespace

import pytest

import tinyre_match


@pytest.fixture
def ticking_clock(monkeypatch):
    # every call to monotonic() advances one "second"
    ticks = count()
    monkeypatch.setattr(tinyre_match, "time",
                        SimpleNamespace(monotonic=lambda: next(ticks)))
