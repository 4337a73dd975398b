from pathlib import Path

import pytest

from redirects_core.merge import ShardMismatchError, merge_into_shard, merge_sorted_lines, prepare_batch
from redirects_core.routing import shard_path


def _shard(tmp_path: Path, shard_id: str, content: str) -> Path:
    path = shard_path(tmp_path, shard_id)
    path.write_text(content)
    return path


def _lines(path: Path) -> list[str]:
    return path.read_text().splitlines()


def test_merge_sorted_lines_interleaves_and_drops_equal() -> None:
    existing = ["A1", "A3", "A5"]
    new = ["A0", "A3", "A4", "A6", "A7"]

    assert list(merge_sorted_lines(existing, new)) == ["A0", "A1", "A3", "A4", "A5", "A6", "A7"]


def test_merge_sorted_lines_empty_inputs() -> None:
    assert list(merge_sorted_lines([], [])) == []
    assert list(merge_sorted_lines([], ["A1", "A2"])) == ["A1", "A2"]
    assert list(merge_sorted_lines(["A1", "A2"], [])) == ["A1", "A2"]


def test_merge_sorted_lines_is_lazy() -> None:
    def _existing():
        yield "A2"
        raise AssertionError("consumed too far")

    merged = merge_sorted_lines(_existing(), ["A1"])

    assert next(merged) == "A1"
    assert next(merged) == "A2"


def test_prepare_batch_sorts_and_deduplicates() -> None:
    assert prepare_batch("A", ["A2,http://b", "A1,http://a", "A2,http://b"]) == ["A1,http://a", "A2,http://b"]


def test_prepare_batch_rejects_foreign_lines() -> None:
    with pytest.raises(ShardMismatchError) as excinfo:
        prepare_batch("A", ["A1,http://a", "B1,http://b"])

    assert excinfo.value.line == "B1,http://b"
    assert excinfo.value.shard_id == "A"


def test_exact_duplicate_leaves_file_byte_identical(tmp_path: Path) -> None:
    path = _shard(tmp_path, "A", "A1,http://x\n")
    before = path.read_bytes()

    result = merge_into_shard(tmp_path, "A", ["A1,http://x"])

    assert path.read_bytes() == before
    assert result.added == 0
    assert result.skipped == 1
    assert result.total_lines == 1


def test_empty_shard_receives_sorted_batch(tmp_path: Path) -> None:
    path = _shard(tmp_path, "A", "")

    result = merge_into_shard(tmp_path, "A", ["A2,http://b", "A1,http://a"])

    assert path.read_text() == "A1,http://a\nA2,http://b\n"
    assert result.added == 2
    assert result.skipped == 0
    assert result.path == path


def test_merge_is_idempotent(tmp_path: Path) -> None:
    path = _shard(tmp_path, "C", "C2,http://2\nC5,http://5\n")
    batch = ["C4,http://4", "C1,http://1", "C9,http://9", "C5,http://5"]

    merge_into_shard(tmp_path, "C", batch)
    once = path.read_bytes()
    second = merge_into_shard(tmp_path, "C", batch)

    assert path.read_bytes() == once
    assert second.added == 0
    assert second.skipped == 4


@pytest.mark.parametrize(
    ("existing", "batch"),
    [
        ([], ["D3", "D1", "D2"]),
        (["D1", "D2"], []),
        (["D1", "D2", "D3"], ["D3", "D2", "D1"]),
        (["D1", "D3", "D5"], ["D2", "D4", "D6"]),
        (["D5", "D6"], ["D1", "D2"]),
        (["D1", "D2"], ["D8", "D9", "D8"]),
    ],
)
def test_merge_output_sorted_and_non_lossy(tmp_path: Path, existing: list[str], batch: list[str]) -> None:
    path = _shard(tmp_path, "D", "".join(f"{line}\n" for line in existing))

    merge_into_shard(tmp_path, "D", batch)

    result = _lines(path)
    assert all(a < b for a, b in zip(result, result[1:]))
    assert set(existing) <= set(result)
    assert set(result) == set(existing) | set(batch)


def test_foreign_line_aborts_before_touching_shard(tmp_path: Path) -> None:
    path = _shard(tmp_path, "A", "A1,http://x\n")

    with pytest.raises(ShardMismatchError):
        merge_into_shard(tmp_path, "A", ["A2,http://y", "B1,http://z"])

    assert path.read_text() == "A1,http://x\n"


def test_missing_shard_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        merge_into_shard(tmp_path, "E", ["E1,http://x"])

    assert list(tmp_path.iterdir()) == []


def test_write_failure_leaves_original(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _shard(tmp_path, "F", "F1,http://a\nF3,http://c\n")

    def _fail_replace(src: object, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("redirects_core.shard_io.os.replace", _fail_replace)

    with pytest.raises(OSError):
        merge_into_shard(tmp_path, "F", ["F2,http://b"])

    assert path.read_text() == "F1,http://a\nF3,http://c\n"
    assert [p.name for p in tmp_path.iterdir()] == ["redirects-F.csv"]


def test_merge_preserves_lone_carriage_return(tmp_path: Path) -> None:
    path = shard_path(tmp_path, "A")
    path.write_bytes(b"A1,http://x\ry\n")

    result = merge_into_shard(tmp_path, "A", ["A2,http://z"])

    assert result.lines_added == 1
    assert path.read_bytes() == b"A1,http://x\ry\nA2,http://z\n"


def test_merge_preserves_undecodable_bytes(tmp_path: Path) -> None:
    path = shard_path(tmp_path, "Z")
    path.write_bytes(b"Z\xff\xfe,http://bad\n")

    merge_into_shard(tmp_path, "Z", ["ZA,http://ok"])

    assert path.read_bytes() == b"ZA,http://ok\nZ\xff\xfe,http://bad\n"
