"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default warnings
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pyresidual.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _make(warnings=()):
    return Result(
        params=FakeParams(value=1.0),
        info={'method': 'householder_qr'},
        timing={'total_seconds': 0.01, 'factorization': 0.005},
        backend_name='cpu_qr',
        warnings=warnings,
    )


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestResultConstruction:

    def test_basic_creation(self):
        result = _make()
        assert result.params.value == 1.0
        assert result.info['method'] == 'householder_qr'
        assert result.timing['factorization'] == 0.005
        assert result.backend_name == 'cpu_qr'

    def test_timing_none(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        assert result.timing is None

    def test_warnings_default_empty(self):
        result = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='cpu')
        assert result.warnings == ()


class TestImmutability:

    def test_cannot_set_params(self):
        result = _make()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(2.0)

    def test_cannot_set_warnings(self):
        result = _make()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ("new",)


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        assert not _make().has_warning("rank")

    def test_substring_match(self):
        result = _make(warnings=("Design matrix is rank-deficient (rank=2)",))
        assert result.has_warning("rank-deficient")

    def test_no_match(self):
        result = _make(warnings=("something else",))
        assert not result.has_warning("rank")
