"""Pytest configuration for conformance tests."""

import pytest
from tests.conformance.runners.evaluator_runner import EvaluatorRunner


def get_available_runners():
    """Return list of available conformance runners."""
    runners = [EvaluatorRunner()]
    return runners


@pytest.fixture(params=get_available_runners(), ids=lambda r: r.name)
def runner(request):
    """Provide conformance runner for testing.

    This fixture is parametrized to run tests against all available runners.
    Currently includes:
    - evaluator: Uses the typtest.query parser and evaluator
    """
    return request.param
