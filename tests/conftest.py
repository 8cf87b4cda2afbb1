import pytest

from table_interpreter import config


@pytest.fixture(autouse=True)
def restore_config():
    max_depth = config.max_evaluation_depth
    precision = config.number_precision
    yield
    config.max_evaluation_depth = max_depth
    config.number_precision = precision
