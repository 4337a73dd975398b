"""Core utilities for the sharded redirect store."""

from .compression import CompressionCodec, codec_for_path, open_text_input
from .config import StoreConfig, load_config_file, resolve_config
from .digest import DigestComputer, compute_digest, compute_digest_gz, digest_bytes
from .export import iter_digests, iter_shard_files
from .extract import (
    RetweetLink,
    StatusRef,
    build_status_index,
    extract_retweets,
    parse_status_url,
)
from .ingest import (
    IngestResult,
    MalformedInputError,
    group_lines_by_shard,
    ingest_lines,
    read_input_lines,
)
from .merge import (
    MergeResult,
    ShardMismatchError,
    merge_into_shard,
    merge_sorted_lines,
    prepare_batch,
)
from .records import Record, parse_record_line
from .redirect_html import make_redirect_html, parse_redirect_html, render_redirect
from .routing import (
    SHARD_COUNT,
    SHARD_IDS,
    is_valid_shard_file_name,
    is_valid_shard_id,
    shard_file_name,
    shard_id_for_digest,
    shard_path,
)
from .shard_io import AtomicShardWriter, init_store, iter_lines
from .validator import (
    FindingKind,
    ShardValidationReport,
    StoreFinding,
    StoreValidationReport,
    validate_shard,
    validate_store,
)

__all__ = [
    "CompressionCodec",
    "codec_for_path",
    "open_text_input",
    "StoreConfig",
    "load_config_file",
    "resolve_config",
    "DigestComputer",
    "compute_digest",
    "compute_digest_gz",
    "digest_bytes",
    "make_redirect_html",
    "parse_redirect_html",
    "render_redirect",
    "SHARD_COUNT",
    "SHARD_IDS",
    "is_valid_shard_file_name",
    "is_valid_shard_id",
    "shard_file_name",
    "shard_id_for_digest",
    "shard_path",
    "Record",
    "parse_record_line",
    "AtomicShardWriter",
    "init_store",
    "iter_lines",
    "MergeResult",
    "ShardMismatchError",
    "merge_into_shard",
    "merge_sorted_lines",
    "prepare_batch",
    "FindingKind",
    "ShardValidationReport",
    "StoreFinding",
    "StoreValidationReport",
    "validate_shard",
    "validate_store",
    "IngestResult",
    "MalformedInputError",
    "group_lines_by_shard",
    "ingest_lines",
    "read_input_lines",
    "iter_digests",
    "iter_shard_files",
    "RetweetLink",
    "StatusRef",
    "build_status_index",
    "extract_retweets",
    "parse_status_url",
]
