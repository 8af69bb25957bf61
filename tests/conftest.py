import pytest


def count_words(text: str) -> int:
    return len(text.split())


@pytest.fixture
def word_counter():
    return count_words
