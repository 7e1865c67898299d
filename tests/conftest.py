from pathlib import Path

import pytest

from category_search.core.io.load_taxonomy import load_taxonomy
from category_search.core.memory.backends import backends_from_graph
from category_search.core.validate.validate_taxonomy import validate_taxonomy

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


@pytest.fixture
def examples_dir() -> Path:
    return EXAMPLES


@pytest.fixture
def news_graph():
    graph, errors = validate_taxonomy(load_taxonomy(str(EXAMPLES / "taxonomy.yaml")))
    assert errors == []
    return graph


@pytest.fixture
def news_backends(news_graph):
    return backends_from_graph(news_graph)
