from __future__ import annotations

import pytest

from services.clock import FixedClock
from tests.payloads import NOW


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)
