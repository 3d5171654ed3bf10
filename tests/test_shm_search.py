import pytest

from syslabs.shm_search import (
    MixedOperationError,
    main,
    parse_search_terms,
    search_lines,
    shared_memory_store_size,
    split_lines,
)
from syslabs.socket_client import InvalidFileError

LINES = [
    "apple,red,fruit",
    "banana,yellow,fruit",
    "carrot,orange,vegetable",
    "cherry,red,fruit",
    "pepper,red,vegetable",
]


def test_store_size_single_page():
    assert shared_memory_store_size(1024) == 4096


def test_store_size_is_whole_pages_and_fits():
    for buffer_size in (0, 100, 4087, 4088, 5000, 10000):
        size = shared_memory_store_size(buffer_size)
        assert size % 4096 == 0
        assert size >= buffer_size + 8


def test_store_size_custom_page():
    assert shared_memory_store_size(10, 16) % 16 == 0
    assert shared_memory_store_size(10, 16) >= 18


def test_store_size_rejects_bad_page():
    with pytest.raises(ValueError):
        shared_memory_store_size(10, 0)


def test_parse_single_term():
    assert parse_search_terms(["red"]) == ("n/a", ["red"])


def test_parse_or_terms():
    assert parse_search_terms(["red", "+", "fruit"]) == ("OR", ["red", "fruit"])


def test_parse_and_terms():
    assert parse_search_terms(["red", "x", "fruit", "x", "apple"]) == (
        "AND",
        ["red", "fruit", "apple"],
    )


def test_parse_mixed_raises():
    with pytest.raises(MixedOperationError) as info:
        parse_search_terms(["red", "+", "fruit", "x", "apple"])
    assert str(info.value) == "Mixed boolean operations not presently supported"


def test_split_lines_drops_empty():
    assert split_lines("a,b\n\nc,d\n") == ["a,b", "c,d"]


def test_search_single_term():
    found = search_lines(LINES, ("n/a", ["yellow"]))
    assert found == ["banana,yellow,fruit"]


def test_search_or():
    found = search_lines(LINES, ("OR", ["apple", "pepper"]))
    assert found == ["apple,red,fruit", "pepper,red,vegetable"]


def test_search_and():
    found = search_lines(LINES, ("AND", ["red", "fruit"]))
    assert found == ["apple,red,fruit", "cherry,red,fruit"]


@pytest.mark.parametrize("workers", [1, 2, 3, 4, 5, 8])
def test_search_independent_of_workers(workers):
    expected = [line for line in LINES if "red" in line]
    assert search_lines(LINES, ("n/a", ["red"]), workers) == expected


def test_search_empty_lines():
    assert search_lines([], ("OR", ["red"])) == []


def test_search_invalid_file_line_raises():
    with pytest.raises(InvalidFileError):
        search_lines(["INVALID FILE"], ("n/a", ["x"]))


def test_search_rejects_zero_workers():
    with pytest.raises(ValueError):
        search_lines(LINES, ("n/a", ["red"]), 0)


def test_main_prints_numbered_matches(tmp_path, capsys):
    csv = tmp_path / "data.csv"
    csv.write_text("\n".join(LINES) + "\n")
    assert main([str(csv), "red", "x", "vegetable"]) == 0
    out = capsys.readouterr().out
    assert out == "1\tpepper,red,vegetable\n"


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.csv"), "red"]) == 1
    assert "INVALID FILE" in capsys.readouterr().err


def test_main_mixed_operations(tmp_path, capsys):
    csv = tmp_path / "data.csv"
    csv.write_text("a\n")
    assert main([str(csv), "a", "+", "b", "x", "c"]) == 1
    assert "Mixed boolean" in capsys.readouterr().err