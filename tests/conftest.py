import pytest

from morris.config import settings


@pytest.fixture(autouse=True)
def strict_invariants():
    previous = settings.strict_invariants
    settings.strict_invariants = True
    yield
    settings.strict_invariants = previous
