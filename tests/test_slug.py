import string

import pytest

from schemastore.slug import generate


@pytest.mark.parametrize("prefix", ["domain", "team", "x", ""])
def test_generate_keeps_prefix_and_separator(prefix):
    result = generate(prefix)
    assert result.startswith(prefix + "_")


@pytest.mark.parametrize("prefix", ["domain", "team", ""])
def test_generate_suffix_is_ten_lowercase_letters(prefix):
    suffix = generate(prefix)[len(prefix) + 1 :]
    assert len(suffix) == 10
    assert set(suffix) <= set(string.ascii_lowercase)


def test_generate_total_length():
    prefix = "service"
    assert len(generate(prefix)) == len(prefix) + 11


def test_generate_prefix_with_underscores_is_preserved():
    prefix = "a_b_c"
    result = generate(prefix)
    assert result.rsplit("_", 1)[0] == prefix


def test_generate_produces_varied_values():
    results = {generate("row") for _ in range(50)}
    assert len(results) > 45