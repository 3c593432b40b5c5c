"""Command line interface for pys3sync."""

import logging
from pathlib import Path
from typing import Any, Optional, TextIO

import click

from .api import S3Client
from .config import config
from .etag import calculate_etag
from .exceptions import ConfigError, EnumerationError, FileReadError, S3CredentialsError
from .output import OutputFormatter
from .sync import SyncEngine, SyncPair, read_path_list
from .utils import BYTES_IN_MB, MAX_CHUNK_SIZE_MB, MIN_CHUNK_SIZE_MB

logger = logging.getLogger(__name__)

THIRD_PARTY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def _configure_logging(debug: bool, quiet: bool) -> None:
    """Set up logging for the CLI."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pys3sync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        # Per-file progress lines are logged at INFO
        logging.getLogger("pys3sync").setLevel(
            logging.WARNING if quiet else logging.INFO
        )

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _read_candidate_paths(files_from: Optional[TextIO]) -> Optional[list[str]]:
    """Return the explicit file list, or None if the folder should be walked.

    The list is read from ``--files-from`` if given, otherwise from stdin when
    it is not a terminal. An empty list means "walk the folder".
    """
    if files_from is not None:
        paths = read_path_list(files_from)
    else:
        stdin = click.get_text_stream("stdin")
        if stdin.isatty():
            return None
        paths = read_path_list(stdin)
    return paths or None


@click.group()
@click.option(
    "--debug",
    "--verbose",
    "-v",
    "debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.version_option(package_name="pys3sync")
@click.pass_context
def main(ctx: Any, debug: bool, quiet: bool, json: bool) -> None:
    """pys3sync - Incrementally upload a local folder to Amazon S3."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["debug"] = debug

    _configure_logging(debug, quiet)


@main.command()
@click.option("--bucket", "-b", help="Destination S3 bucket")
@click.option("--region", "-r", help="Region of the S3 bucket")
@click.option("--src", "--folder", "-s", "src", help="Local folder to back up")
@click.option("--dest", "-d", default=None, help="Remote key prefix (default: none)")
@click.option("--force", is_flag=True, help="Skip hashing and upload all files")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=1,
    help="Number of files processed in parallel (default: 1)",
)
@click.option(
    "--chunk-size",
    "-c",
    type=int,
    default=5,
    help=(
        "Part size in MB for ETags and multipart uploads (default: 5MB). "
        "Changing it makes previously uploaded large files look changed."
    ),
)
@click.option(
    "--files-from",
    type=click.File("r"),
    default=None,
    help="Read the files to check from this file ('-' for stdin), one per line",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Stop starting new files after this many seconds",
)
@click.option(
    "--progress/--no-progress",
    default=False,
    help="Show a progress spinner while checking files",
)
@click.pass_context
def sync(  # noqa: C901
    ctx: Any,
    bucket: Optional[str],
    region: Optional[str],
    src: Optional[str],
    dest: Optional[str],
    force: bool,
    dry_run: bool,
    workers: int,
    chunk_size: int,
    files_from: Optional[TextIO],
    timeout: Optional[float],
    progress: bool,
) -> None:
    """Upload new and changed files from a local folder to S3.

    Files are compared by ETag: the MD5-based ETag stored in S3 is compared
    with one computed locally, so unchanged files are never transferred.

    If a list of files is piped on stdin (or given with --files-from), only
    those files are checked; otherwise the folder is walked recursively.

    Options may also be set with the environment variables PYS3SYNC_BUCKET,
    PYS3SYNC_REGION (or AWS_REGION), PYS3SYNC_SRC and PYS3SYNC_DEST, or in
    the config file written by 'pys3sync init'.

    Examples:
        pys3sync sync -b my-bucket -r eu-central-1 --src /mnt/data
        pys3sync sync -b my-bucket -r eu-central-1 --src /mnt/data --dest /intern
        find /mnt/data -mtime -1 -type f | pys3sync sync --src /mnt/data
    """
    out: OutputFormatter = ctx.obj["out"]

    bucket = config.resolve("bucket", bucket)
    region = config.resolve("region", region)
    src = config.resolve("src", src)
    if dest is None:
        dest = config.dest

    if not bucket or not region or not src:
        out.error("bucket, region and src are all required parameters")
        ctx.exit(1)

    if chunk_size < MIN_CHUNK_SIZE_MB:
        out.error(f"Chunk size must be at least {MIN_CHUNK_SIZE_MB}MB")
        ctx.exit(1)
    if chunk_size > MAX_CHUNK_SIZE_MB:
        out.error(f"Chunk size cannot exceed {MAX_CHUNK_SIZE_MB}MB")
        ctx.exit(1)
    if workers < 1:
        out.error("Number of workers must be at least 1")
        ctx.exit(1)
    if timeout is not None and timeout <= 0:
        out.error("Timeout must be positive")
        ctx.exit(1)

    local_path = Path(src)
    if not local_path.exists():
        out.error(f"The folder {src!r} doesn't exist")
        ctx.exit(1)

    chunk_size_bytes = chunk_size * BYTES_IN_MB

    if force:
        out.info("Will force upload every file due to --force flag")

    logger.info("Creating S3 session")
    try:
        client = S3Client(bucket=bucket, region=region, chunk_size=chunk_size_bytes)
        client.check_credentials()
    except S3CredentialsError as e:
        out.error(str(e))
        ctx.exit(1)

    paths = _read_candidate_paths(files_from)
    if paths is not None:
        logger.info("Got %d files from stdin. Starting to check them", len(paths))
    else:
        logger.info("Got no file list from stdin. Starting to walk %r", src)

    pair = SyncPair(
        local=local_path,
        src=src,
        bucket=bucket,
        remote=dest,
        force=force,
        chunk_size=chunk_size_bytes,
    )
    engine = SyncEngine(client, out)

    out.info(f"Syncing: {pair}")
    try:
        stats = engine.sync_pair(
            pair,
            paths=paths,
            dry_run=dry_run,
            max_workers=workers,
            timeout=timeout,
            show_progress=progress,
        )
    except (ConfigError, EnumerationError) as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(stats.to_dict())
    else:
        for line in stats.summary_lines():
            out.print(line)

    if stats.cancelled:
        ctx.exit(1)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path())
@click.option(
    "--chunk-size",
    "-c",
    type=int,
    default=5,
    help="Part size in MB (default: 5MB)",
)
@click.pass_context
def etag(ctx: Any, files: tuple[str, ...], chunk_size: int) -> None:
    """Print the S3 ETag of local files.

    Useful to compare a file with the ETag shown in the S3 console.

    FILES: Local files to fingerprint
    """
    out: OutputFormatter = ctx.obj["out"]

    if chunk_size < 1:
        out.error("Chunk size must be at least 1MB")
        ctx.exit(1)

    results = {}
    failed = False
    for file_path in files:
        try:
            value = calculate_etag(file_path, chunk_size * BYTES_IN_MB)
        except FileReadError as e:
            out.error(str(e))
            failed = True
            continue
        results[file_path] = value
        if not out.json_output:
            out.print(f"{value}  {file_path}")

    if out.json_output:
        out.output_json(results)

    if failed:
        ctx.exit(1)


@main.command()
@click.option("--bucket", "-b", prompt="Destination S3 bucket", help="S3 bucket")
@click.option("--region", "-r", prompt="Region of the S3 bucket", help="AWS region")
@click.option("--dest", "-d", default="", help="Remote key prefix")
@click.pass_context
def init(ctx: Any, bucket: str, region: str, dest: str) -> None:
    """Save default settings to ~/.config/pys3sync/config."""
    out: OutputFormatter = ctx.obj["out"]

    values = {"bucket": bucket, "region": region}
    if dest:
        values["dest"] = dest

    try:
        config_path = config.save(values)
    except OSError as e:
        out.error(f"Failed to write configuration: {e}")
        ctx.exit(1)

    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "Configuration saved successfully"),
            ("Config file", str(config_path)),
        ],
    )


@main.command(name="config")
@click.pass_context
def show_config(ctx: Any) -> None:
    """Show the settings resolved from the environment and config file."""
    out: OutputFormatter = ctx.obj["out"]

    items = [
        ("Config file", str(config.get_config_path())),
        ("Bucket", config.bucket or "-"),
        ("Region", config.region or "-"),
        ("Source", config.src or "-"),
        ("Destination prefix", config.dest or "-"),
    ]
    if out.json_output:
        out.output_json({label: value for label, value in items})
    else:
        width = max(len(label) for label, _ in items)
        for label, value in items:
            out.print(f"{label.ljust(width)}  {value}")


if __name__ == "__main__":
    main()
