"""Fixtures for the reconciliation tests."""

import pytest

from insurance_batch import ProblematicContractsChecker, ReconciliationPolicy


@pytest.fixture
def make_checker(repos, notifier, clock):
    """Build a checker over the test repositories; keyword args override defaults."""

    def _make(**kwargs) -> ProblematicContractsChecker:
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("policy", ReconciliationPolicy())
        return ProblematicContractsChecker(
            repos.contracts, repos.clients, repos.verifications, **kwargs,
        )

    return _make


@pytest.fixture
def checker(make_checker) -> ProblematicContractsChecker:
    return make_checker()


@pytest.fixture
def review_checker(make_checker) -> ProblematicContractsChecker:
    """Checker that leaves flagged contracts unexpired."""
    return make_checker(policy=ReconciliationPolicy(expire_problematic_contracts=False))
