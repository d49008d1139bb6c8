"""
Pytest fixtures for the transaction enrichment tests.
"""

from __future__ import annotations

import pytest

from factories import make_safe_info, make_token
from safe_tx_gateway.converters import InfoClassifier
from safe_tx_gateway.providers import TokenType


@pytest.fixture
def classifier():
    return InfoClassifier()


@pytest.fixture
def safe_info():
    return make_safe_info()


@pytest.fixture
def erc20_token():
    return make_token(TokenType.ERC20)


@pytest.fixture
def erc721_token():
    return make_token(TokenType.ERC721)
