"""Unit tests for FailureInjector."""
from __future__ import annotations

import pytest

from eda_fanout.kernel.errors import BackendUnavailableError
from eda_fanout.testing import FailureInjector


class TestFailureInjector:
    def test_invalid_rate(self) -> None:
        with pytest.raises(ValueError):
            FailureInjector(failure_rate=1.5)

    def test_never_fails_by_default(self) -> None:
        injector = FailureInjector()
        for _ in range(20):
            injector.check()
        assert injector.failures == 0
        assert injector.calls == 20

    def test_fail_times_then_recovers(self) -> None:
        injector = FailureInjector(fail_times=2)
        for _ in range(2):
            with pytest.raises(BackendUnavailableError):
                injector.check()
        injector.check()
        assert injector.failures == 2

    def test_permanent_until_healed(self) -> None:
        injector = FailureInjector()
        injector.permanent()
        for _ in range(3):
            with pytest.raises(BackendUnavailableError):
                injector.check()
        injector.heal()
        injector.check()

    def test_always_failing_rate(self) -> None:
        injector = FailureInjector(failure_rate=1.0, seed=1)
        with pytest.raises(BackendUnavailableError):
            injector.check()

    def test_custom_exception(self) -> None:
        injector = FailureInjector(fail_times=1, exception_factory=lambda: TimeoutError("slow"))
        with pytest.raises(TimeoutError):
            injector.check()
