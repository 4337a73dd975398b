from pathlib import Path

from redirects_core.ingest import ingest_lines
from redirects_core.records import Record
from redirects_core.routing import shard_path
from redirects_core.shard_io import init_store
from redirects_core.validator import FindingKind, validate_shard, validate_store


def _records(count: int) -> list[Record]:
    return [Record.from_url(f"http://example.com/item/{i}") for i in range(count)]


def _build_store(data_dir: Path, records: list[Record]) -> None:
    init_store(data_dir)
    ingest_lines([record.to_line() for record in records], data_dir)


def _write_shard(tmp_path: Path, lines: list[str]) -> Path:
    path = tmp_path / "redirects-X.csv"
    path.write_text("".join(f"{line}\n" for line in lines))
    return path


def test_valid_shard_passes(tmp_path: Path) -> None:
    records = sorted((Record.from_url(f"http://example.com/{i}") for i in range(20)), key=Record.to_line)
    path = _write_shard(tmp_path, [r.to_line() for r in records])

    report = validate_shard(path)

    assert report.is_valid
    assert report.is_sorted
    assert report.invalid_lines == []
    assert report.line_count == 20


def test_empty_shard_is_valid(tmp_path: Path) -> None:
    report = validate_shard(_write_shard(tmp_path, []))

    assert report.is_valid
    assert report.line_count == 0


def test_flipped_digest_character_is_reported(tmp_path: Path) -> None:
    records = sorted((Record.from_url(f"http://example.com/{i}") for i in range(5)), key=Record.to_line)
    lines = [r.to_line() for r in records]
    victim = records[2]
    flipped = victim.digest[:10] + ("A" if victim.digest[10] != "A" else "B") + victim.digest[11:]
    lines[2] = f"{flipped},{victim.url}"
    path = _write_shard(tmp_path, lines)

    report = validate_shard(path)

    assert report.invalid_lines == [lines[2]]
    assert not report.is_valid


def test_malformed_lines_are_reported(tmp_path: Path) -> None:
    good = Record.from_url("http://example.com/good").to_line()
    path = _write_shard(tmp_path, ["0-no-comma", good])

    report = validate_shard(path)

    assert report.invalid_lines == ["0-no-comma"]
    assert report.is_sorted


def test_url_with_commas_is_validated_as_a_whole(tmp_path: Path) -> None:
    line = Record.from_url("http://example.com/a,b,c").to_line()
    report = validate_shard(_write_shard(tmp_path, [line]))

    assert report.is_valid


def test_equal_adjacent_lines_mark_shard_unsorted(tmp_path: Path) -> None:
    line = Record.from_url("http://example.com/dup").to_line()
    path = _write_shard(tmp_path, [line, line])

    report = validate_shard(path)

    assert report.is_sorted is False
    assert report.invalid_lines == []
    assert not report.is_valid


def test_descending_lines_mark_shard_unsorted(tmp_path: Path) -> None:
    records = sorted((Record.from_url(f"http://example.com/{i}") for i in range(3)), key=Record.to_line)
    lines = [r.to_line() for r in records]
    path = _write_shard(tmp_path, [lines[0], lines[2], lines[1]])

    report = validate_shard(path)

    assert report.is_sorted is False
    assert report.line_count == 3


def test_full_store_is_valid(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    _build_store(data_dir, _records(100))

    report = validate_store(data_dir)

    assert report.entry_count == 32
    assert report.findings == []
    assert len(report.shards) == 32
    assert report.is_valid


def test_missing_shard_is_a_cardinality_finding(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    _build_store(data_dir, _records(10))
    shard_path(data_dir, "Q").unlink()

    report = validate_store(data_dir)

    assert report.entry_count == 31
    assert [f.kind for f in report.findings] == [FindingKind.TOO_FEW_FILES]
    assert "Too few files in data directory (31)" in report.findings[0].message
    assert not report.is_valid


def test_extra_file_is_reported_twice(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    _build_store(data_dir, _records(10))
    (data_dir / "notes.txt").write_text("")

    report = validate_store(data_dir)

    kinds = [f.kind for f in report.findings]
    assert FindingKind.TOO_MANY_FILES in kinds
    assert FindingKind.INVALID_FILE_NAME in kinds
    assert not report.is_valid


def test_misnamed_file_with_correct_count(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    _build_store(data_dir, _records(10))
    shard_path(data_dir, "Z").rename(data_dir / "redirects-z.csv")

    report = validate_store(data_dir)

    assert [f.kind for f in report.findings] == [FindingKind.INVALID_FILE_NAME]
    assert report.findings[0].path == data_dir / "redirects-z.csv"


def test_corrupted_shard_fails_store_validation(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    _build_store(data_dir, _records(10))
    path = shard_path(data_dir, "A")
    path.write_text("A" + "2" * 31 + ",http://example.com/not-matching\n")

    report = validate_store(data_dir)

    assert report.findings == []
    bad = [r for r in report.shards if not r.is_valid]
    assert [r.path for r in bad] == [path]
    assert not report.is_valid


def test_undecodable_line_is_reported_invalid(tmp_path: Path) -> None:
    path = tmp_path / "redirects-Z.csv"
    path.write_bytes(b"Z\xff\xfe,http://bad\n")

    report = validate_shard(path)

    assert len(report.invalid_lines) == 1
    assert not report.is_valid


def test_lone_carriage_return_does_not_split_line(tmp_path: Path) -> None:
    path = tmp_path / "redirects-A.csv"
    path.write_bytes(b"A1,http://x\ry\n")

    report = validate_shard(path)

    assert report.line_count == 1
    assert report.invalid_lines == ["A1,http://x\ry"]
