import logging

import logzero
import pytest

from logzero import logger


@pytest.fixture
def caplog(caplog):
    # logzero's logger does not propagate to the root logger
    logzero.loglevel(logging.DEBUG)
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
