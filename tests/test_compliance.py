"""
Tests for the compliance check.

These tests verify evaluate():
- Treats placement as a set comparison (order never matters)
- Reports a down service as non-compliant
- Reports missing and extra instances as non-compliant
"""

import itertools

import pytest

from operator_placement.compliance import evaluate
from operator_placement.types import ServiceDesired, ServiceObserved


class TestEvaluate:
    """Tests for evaluate()."""

    def test_same_instances_is_compliant(self, key):
        """Running exactly on the preferred instances is compliant."""
        desired = ServiceDesired(key=key, preferred=("A", "B"))
        observed = ServiceObserved(key=key, running=("A", "B"))

        assert evaluate(desired, observed) is True

    @pytest.mark.parametrize(
        "preferred,running",
        [
            (p, r)
            for p in itertools.permutations(("A", "B", "C"))
            for r in itertools.permutations(("A", "B", "C"))
        ],
    )
    def test_order_never_changes_verdict(self, key, preferred, running):
        """Reordering preferred or running keeps the verdict."""
        desired = ServiceDesired(key=key, preferred=preferred)
        observed = ServiceObserved(key=key, running=running)

        assert evaluate(desired, observed) is True

    def test_down_service_is_not_compliant(self, key):
        """A down service never satisfies a preference."""
        desired = ServiceDesired(key=key, preferred=("A",))
        observed = ServiceObserved(key=key, running=(), down=True)

        assert evaluate(desired, observed) is False

    def test_missing_preferred_instance_is_not_compliant(self, key):
        """Running on a subset of the preferred instances is drift."""
        desired = ServiceDesired(key=key, preferred=("A", "B"))
        observed = ServiceObserved(key=key, running=("A",))

        assert evaluate(desired, observed) is False

    def test_extra_instance_is_not_compliant(self, key):
        """Running on an additional available instance is drift."""
        desired = ServiceDesired(key=key, preferred=("A",), available=("C",))
        observed = ServiceObserved(key=key, running=("A", "C"))

        assert evaluate(desired, observed) is False

    def test_running_elsewhere_is_not_compliant(self, key):
        """Running only on a fallback instance is drift."""
        desired = ServiceDesired(key=key, preferred=("A", "B"), available=("C", "D"))
        observed = ServiceObserved(key=key, running=("C",))

        assert evaluate(desired, observed) is False
