import pytest

from arte import access, ratelimit


@pytest.fixture(autouse=True)
def isolated_state():
    access.set_backend(access.MemoryBackend())
    ratelimit._reset()
    yield
    ratelimit._reset()
