"""Command line interface for datafold."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from datafold import create_default_processor, pipeline_version
from datafold.core import UnsupportedFormatError, registry
from datafold.ingestion import (
    DatasetProcessor,
    HistoryEntry,
    ProcessingHistory,
    SourceNotFoundError,
    UploadRequest,
)
from datafold.normalization import ProcessedDataset
from datafold.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)


def load_environment() -> None:
    candidates = []
    if env_file := os.getenv("ENV_FILE"):
        candidates.append(Path(env_file))
    candidates.append(Path(".env"))

    for path in candidates:
        if not path.exists():
            continue
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip('"')
                os.environ.setdefault(key, value)


def configure_logging(level: str | None = None) -> None:
    """Configure logging using YAML/INI files or basic configuration."""

    config_candidates = []
    if config_env := os.getenv("LOGGING_CONFIG"):
        config_candidates.append(Path(config_env))
    config_candidates.extend(
        Path(name) for name in ("logging.yaml", "logging.yml", "logging.ini")
    )

    for config_path in config_candidates:
        if not config_path.exists():
            continue
        suffix = config_path.suffix.lower()
        try:
            if suffix in {".ini", ".cfg"}:
                logging.config.fileConfig(config_path, disable_existing_loggers=False)
            else:
                with config_path.open("r", encoding="utf-8") as handle:
                    logging.config.dictConfig(yaml.safe_load(handle))
            return
        except (OSError, ValueError, KeyError, TypeError, yaml.YAMLError) as exc:
            print(
                f"Failed to load logging config {config_path}: {exc}. Falling back to basic logging.",
                file=sys.stderr,
            )
            break

    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _print_dataset(dataset: ProcessedDataset, *, full: bool) -> None:
    payload = dataset.to_dict()
    if not full:
        payload.pop("processedData")
        payload.pop("previewData")
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _record(settings: Settings, dataset: ProcessedDataset, command: str) -> None:
    history = ProcessingHistory(settings.sqlite_path)
    history.record(
        HistoryEntry.from_dataset(
            dataset,
            {"pipeline_version": pipeline_version(), "command": command},
        )
    )


async def _upload_one(
    processor: DatasetProcessor, path: Path, semaphore: asyncio.Semaphore
) -> Optional[ProcessedDataset]:
    async with semaphore:
        with path.open("rb") as handle:
            request = UploadRequest(
                file_name=path.name, file_size=path.stat().st_size, stream=handle
            )
            if not processor.validate(request):
                logger.warning("Upload of %s was rejected", path)
                return None
            stored = await processor.storage.save(request)
        return await processor.process(stored, request.extension)


async def upload_files(processor: DatasetProcessor, paths: Iterable[Path]) -> List[Optional[ProcessedDataset]]:
    """Validate, store and process *paths* with bounded concurrency."""

    semaphore = asyncio.Semaphore(processor.upload_limits.max_concurrent_uploads)
    return list(await asyncio.gather(*(_upload_one(processor, path, semaphore) for path in paths)))


def command_validate(args: argparse.Namespace, processor: DatasetProcessor, settings: Settings) -> int:
    status = 0
    for name in args.files:
        path = Path(name)
        size = path.stat().st_size if path.is_file() else 0
        accepted = processor.validate(UploadRequest(file_name=path.name, file_size=size))
        print(f"{path}: {'accepted' if accepted else 'rejected'}")
        if not accepted:
            status = 1
    return status


def command_upload(args: argparse.Namespace, processor: DatasetProcessor, settings: Settings) -> int:
    paths = [Path(name) for name in args.files]
    results = asyncio.run(upload_files(processor, paths))
    status = 0
    for path, dataset in zip(paths, results):
        if dataset is None:
            print(f"{path}: rejected")
            status = 1
            continue
        if args.record:
            _record(settings, dataset, "upload")
        _print_dataset(dataset, full=args.full)
        if not dataset.is_processed:
            status = 1
    return status


def command_process(args: argparse.Namespace, processor: DatasetProcessor, settings: Settings) -> int:
    path = Path(args.file)
    extension = args.type or path.suffix
    try:
        dataset = asyncio.run(processor.process(str(path), extension))
    except (SourceNotFoundError, UnsupportedFormatError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    if args.record:
        _record(settings, dataset, "process")
    _print_dataset(dataset, full=args.full)
    return 0 if dataset.is_processed else 1


def command_formats(args: argparse.Namespace, processor: DatasetProcessor, settings: Settings) -> int:
    print("Registered formats:")
    for definition in registry:
        print(
            f"- {definition.file_type.value}: {', '.join(definition.extensions)}"
            f" - {definition.description} ({definition.module})"
        )
    return 0


def command_history(args: argparse.Namespace, processor: DatasetProcessor, settings: Settings) -> int:
    for entry in ProcessingHistory(settings.sqlite_path).fetch(limit=args.limit):
        state = "processed" if entry.is_processed else f"failed: {entry.processing_errors}"
        print(
            f"{entry.recorded_at.isoformat()} {entry.file_name} [{entry.file_type}] "
            f"rows={entry.row_count} columns={entry.column_count} {state}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normalize uploaded data files.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {pipeline_version()}")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    parser_validate = subparsers.add_parser("validate", help="Check files against upload limits")
    parser_validate.add_argument("files", nargs="+")
    parser_validate.set_defaults(func=command_validate)

    parser_upload = subparsers.add_parser("upload", help="Validate, store and process files")
    parser_upload.add_argument("files", nargs="+")
    parser_upload.add_argument("--record", action="store_true", help="Record results in the history database")
    parser_upload.add_argument("--full", action="store_true", help="Include preview and row payloads")
    parser_upload.set_defaults(func=command_upload)

    parser_process = subparsers.add_parser("process", help="Process an already stored file")
    parser_process.add_argument("file")
    parser_process.add_argument("--type", help="File extension to parse as, e.g. .csv")
    parser_process.add_argument("--record", action="store_true", help="Record the result in the history database")
    parser_process.add_argument("--full", action="store_true", help="Include preview and row payloads")
    parser_process.set_defaults(func=command_process)

    parser_formats = subparsers.add_parser("formats", help="List registered formats")
    parser_formats.set_defaults(func=command_formats)

    parser_history = subparsers.add_parser("history", help="Show recorded processing runs")
    parser_history.add_argument("--limit", type=int, default=20)
    parser_history.set_defaults(func=command_history)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.load()
    configure_logging(settings.log_level)
    try:
        processor = create_default_processor(settings)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    return args.func(args, processor, settings)


if __name__ == "__main__":  # pragma: no cover - entry point for CLI usage
    raise SystemExit(main())
