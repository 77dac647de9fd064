import pytest
from loguru import logger

from autolayout.models import Edge, Node

NOW = 1_700_000_000_000


@pytest.fixture(autouse=True)
def _reset_loguru():
    """Drop sinks added during a test (the CLI installs one on captured stderr)."""
    yield
    logger.remove()


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


def nodes_of(*ids: str, **kwargs) -> list[Node]:
    return [Node(id=i, **kwargs) for i in ids]


def edges_of(*pairs: str) -> list[Edge]:
    """Edges from "A>B" strings."""
    result = []
    for pair in pairs:
        source, target = pair.split(">")
        result.append(Edge(source=source, target=target))
    return result
