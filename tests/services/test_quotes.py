# tests/services/test_quotes.py
import random

import pytest

from pow_quote.services.quotes import QUOTES, QuoteProvider


def test_get_quote_returns_pool_member():
    provider = QuoteProvider()
    for _ in range(20):
        assert provider.get_quote() in QUOTES


def test_get_quote_is_seedable():
    first = QuoteProvider(rng=random.Random(7))
    second = QuoteProvider(rng=random.Random(7))
    assert [first.get_quote() for _ in range(10)] == [second.get_quote() for _ in range(10)]


def test_default_pool_is_single_line():
    assert all("\n" not in quote for quote in QUOTES)


@pytest.mark.parametrize("quotes", [(), ("multi\nline",)])
def test_invalid_pool(quotes):
    with pytest.raises(ValueError):
        QuoteProvider(quotes)
