"""Test fixtures."""
import logging
import sys

import pytest

from xdcadapter.masternode import MasternodeClient
from xdcadapter.testing.mock_chain import MockChainQuery, make_address
from xdcadapter.units import to_wei


@pytest.fixture(scope="session")
def logger(request) -> logging.Logger:
    """Initialize stdout logger using colored output."""

    logger = logging.getLogger()

    # pytest --log-level option
    log_level = request.config.getoption("--log-level")

    # Set log format to dislay the logger name to hunt down verbose logging modules
    fmt = "%(name)-25s %(levelname)-8s %(message)s"

    # Use colored logging output for console
    try:
        import coloredlogs
        coloredlogs.install(level=log_level, fmt=fmt, logger=logger)
    except ImportError:
        logging.basicConfig(stream=sys.stdout, level=log_level)

    # Disable logging of JSON-RPC requests and replies
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.providers.AsyncHTTPProvider").setLevel(logging.WARNING)

    # Disable all internal debug logging of requests and urllib3
    # E.g. HTTP traffic
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logger


@pytest.fixture()
def mock_chain() -> MockChainQuery:
    """Three candidates, two voters and one pending withdrawal.

    - Candidate 1: 5M XDC, registered, two voters

    - Candidate 2: 20M XDC, registered, one voter

    - Candidate 3: 10M XDC, resigned
    """
    chain = MockChainQuery(block_height=1850)
    chain.add_candidate(make_address(1), make_address(101), to_wei(5_000_000))
    chain.add_candidate(make_address(2), make_address(102), to_wei(20_000_000))
    chain.add_candidate(make_address(3), make_address(103), to_wei(10_000_000), registered=False)

    chain.add_vote(make_address(1), make_address(201), to_wei(50_000))
    chain.add_vote(make_address(1), make_address(202), to_wei(25_000))
    chain.add_vote(make_address(2), make_address(201), to_wei("30000.5"))

    chain.add_withdrawal(make_address(201), 1800, to_wei(100))
    chain.add_withdrawal(make_address(201), 5000, to_wei(200))
    return chain


@pytest.fixture()
def masternode_client(mock_chain) -> MasternodeClient:
    return MasternodeClient(mock_chain)
