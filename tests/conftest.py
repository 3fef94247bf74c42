import pytest

from matbridge import LocalEngine, MatrixProcessor


@pytest.fixture
def engine() -> LocalEngine:
    return LocalEngine()


@pytest.fixture
def processor(engine: LocalEngine) -> MatrixProcessor:
    return MatrixProcessor(engine)
