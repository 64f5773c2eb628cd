"""Command-line interface for the mirror backup application."""

import signal
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Tuple

import click
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from . import __version__
from .config.settings import BackupConfig, BackupJobConfig, SyncOptions
from .errors import ArgumentError, BackupError
from .sync.backup_manager import BackupManager
from .sync.entry_probe import EntryProbe
from .sync.reporter import ConsoleReporter, LogFileReporter
from .utils.file_utils import FileHelper
from .utils.logging import get_logger, setup_logging

console = Console()
error_console = Console(stderr=True)

logger = get_logger("cli")

COMMAND_LINE_JOB = "command-line"


@click.group()
@click.version_option(version=__version__)
def cli():
    """Mirror Backup Tool

    Mirrors source directories into a destination tree. Files removed at the
    source are renamed with a '#deleted#' suffix instead of being deleted.
    """
    pass


@cli.command()
@click.argument('paths', nargs=-1, type=click.Path(path_type=Path))
@click.option('--dry-run', '-d',
              is_flag=True,
              help='Print what the backup would do without changing anything')
@click.option('--mark-deleted-files', '-m',
              type=click.Choice(['yes', 'no']),
              default=None,
              help='Rename files deleted at the source instead of deleting them [default: yes]')
@click.option('--input-file', '-i',
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='File listing source paths line by line')
@click.option('--log-file', '-o',
              type=click.Path(dir_okay=False, path_type=Path),
              help='Write the backup lines to this new file instead of the console')
@click.option('--ignore-symbolic-links', '-L', 'ignore_symlinks',
              is_flag=True,
              help='Do not back up symbolic links and their contents')
@click.option('--config', '-c',
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Run the jobs of this configuration file instead of PATHS')
@click.option('--job', '-j',
              help='Run specific job by name (with --config; default: all enabled jobs)')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Log debug diagnostics to stderr')
def backup(paths: Tuple[Path, ...], dry_run: bool, mark_deleted_files: Optional[str],
           input_file: Optional[Path], log_file: Optional[Path], ignore_symlinks: bool,
           config: Optional[Path], job: Optional[str], verbose: bool):
    """Back up SOURCE... into DESTINATION (the last of PATHS)."""
    setup_logging(log_level="DEBUG" if verbose else "WARNING")

    if config is None:
        required = 1 if input_file else 2
        if len(paths) < required:
            raise click.UsageError(
                "This command requires a destination." if input_file
                else "This command requires at least two arguments: SOURCE... DESTINATION")

    log_stream = None
    try:
        if config is not None:
            backup_config = BackupConfig.from_yaml(config)
            jobs = _select_jobs(backup_config, job)
        else:
            backup_config = BackupConfig(
                backup_jobs=[_command_line_job(paths, input_file)],
                sync_options=SyncOptions(dry_run=False),
            )
            jobs = backup_config.backup_jobs

        options = backup_config.sync_options
        if dry_run:
            options.dry_run = True
        if mark_deleted_files is not None:
            options.mark_deleted_files = mark_deleted_files == 'yes'
        if ignore_symlinks:
            options.ignore_symlinks = True

        if log_file is not None:
            log_stream = _open_log_file(log_file, options.dry_run)
            reporter = LogFileReporter(log_stream)
        else:
            reporter = ConsoleReporter(console, error_console)

        if options.dry_run:
            console.print("🔍 DRY RUN MODE - No files will be changed", style="yellow bold")

        backup_manager = BackupManager(backup_config, reporter)
        with _cancel_on_interrupt() as cancel_event:
            results = []
            for job_config in jobs:
                results.append(backup_manager.run_backup_job(job_config, cancel_event))
                if cancel_event.is_set():
                    break

    except (BackupError, ValidationError, OSError) as e:
        error_console.print(f"error: {e}", style="red bold", markup=False, highlight=False)
        sys.exit(1)
    finally:
        if log_stream is not None:
            log_stream.close()

    _display_backup_results(results, backup_manager)

    if any(result['status'] != 'completed' for result in results):
        sys.exit(1)


def _command_line_job(paths: Tuple[Path, ...], input_file: Optional[Path]) -> BackupJobConfig:
    """Build the job described by positional arguments."""
    sources: List[str] = []
    if input_file is not None:
        sources.extend(FileHelper.read_path_list(input_file))
    sources.extend(str(p) for p in paths[:-1])
    if not sources:
        raise ArgumentError(f"No source paths found in {input_file}")
    return BackupJobConfig(name=COMMAND_LINE_JOB, sources=sources, destination=str(paths[-1]))


def _select_jobs(backup_config: BackupConfig, job_name: Optional[str]) -> List[BackupJobConfig]:
    if job_name:
        job_config = backup_config.get_job_by_name(job_name)
        if not job_config:
            raise ArgumentError(f"Job '{job_name}' not found")
        return [job_config]
    return backup_config.get_enabled_jobs()


def _open_log_file(log_file: Path, dry_run: bool):
    """Create the report log file, refusing to overwrite an existing one."""
    probe = EntryProbe(log_file, dry_run)
    if probe.exists:
        raise ArgumentError(f"The specified log file already exists ({log_file})")
    if not probe.can_create:
        raise ArgumentError(f"You don't have permission to write to the specified log file ({log_file})")
    # Created even in dry-run: it receives the simulated lines.
    return open(log_file, 'x', encoding='utf-8')


@contextmanager
def _cancel_on_interrupt():
    """Turn Ctrl+C into a cancellation request for the running backup."""
    cancel_event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel_event
        return

    def _handler(signum, frame):
        logger.warning("Interrupted, cancelling backup")
        cancel_event.set()
        # A second Ctrl+C interrupts immediately.
        signal.signal(signal.SIGINT, previous)

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield cancel_event
    finally:
        signal.signal(signal.SIGINT, previous)


def _display_backup_results(results, backup_manager):
    """Display backup results in a table."""
    table = Table(title="Backup Results")
    table.add_column("Job Name", style="cyan")
    table.add_column("Status", style="magenta")
    table.add_column("Created", justify="right", style="green")
    table.add_column("Updated", justify="right", style="green")
    table.add_column("Unchanged", justify="right")
    table.add_column("Removed", justify="right", style="yellow")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Data Copied", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Errors", justify="right", style="red")

    for result in results:
        status_style = "green" if result['status'] == 'completed' else "red"
        removed = result.get('files_marked_deleted', 0) + result.get('files_deleted', 0)

        table.add_row(
            result['job_name'],
            f"[{status_style}]{result['status']}[/{status_style}]",
            str(result.get('files_created', 0)),
            str(result.get('files_updated', 0)),
            str(result.get('files_unchanged', 0)),
            str(removed),
            str(result.get('files_skipped', 0)),
            FileHelper.format_file_size(result.get('bytes_transferred', 0)),
            f"{result.get('duration', 0):.1f}s",
            str(len(result.get('errors', [])))
        )

    console.print(table)

    summary = backup_manager.get_backup_summary(results)
    if summary['total_errors'] > 0:
        rprint(f"\n⚠️ [yellow]{summary['total_errors']} errors occurred:[/yellow]")
        for result in results:
            for error in result.get('errors', []):
                console.print(f"   • {error}", style="red", markup=False, highlight=False)


@cli.command()
@click.option('--config', '-c',
              type=click.Path(path_type=Path),
              default=Path('config/config.yaml'),
              help='Path to save configuration file')
def init(config: Path):
    """Initialize a new configuration file."""
    if config.exists():
        if not click.confirm(f"Configuration file {config} already exists. Overwrite?"):
            return

    console.print("🚀 Creating new configuration file...")

    sample_config = {
        'backup_jobs': [
            {
                'name': 'documents',
                'sources': [str(Path.home() / 'Documents')],
                'destination': '/mnt/backup',
                'enabled': True
            }
        ],
        'sync_options': {
            'mark_deleted_files': True,
            'dry_run': False,
            'ignore_symlinks': False,
        }
    }

    backup_config = BackupConfig(**sample_config)
    backup_config.to_yaml(config)

    console.print(f"✅ Configuration saved to {config}", style="green")
    console.print("\n📝 Next steps:")
    console.print("1. Edit the configuration file to match your setup")
    console.print(f"2. Run 'mirror-backup backup --config {config} --dry-run' to preview")
    console.print(f"3. Run 'mirror-backup backup --config {config}' to start backing up")


@cli.command()
@click.option('--config', '-c',
              type=click.Path(exists=True, path_type=Path),
              default=Path('config/config.yaml'),
              help='Path to configuration file')
def status(config: Path):
    """Show configured backup jobs and options."""
    try:
        backup_config = BackupConfig.from_yaml(config)
    except (ValidationError, OSError) as e:
        error_console.print(f"error: {e}", style="red bold", markup=False, highlight=False)
        sys.exit(1)

    options = backup_config.sync_options
    console.print("⚙️ [bold]Sync Options:[/bold]")
    rprint(f"   • Mark deleted files: {'yes' if options.mark_deleted_files else 'no'}")
    rprint(f"   • Dry run: {'yes' if options.dry_run else 'no'}")
    rprint(f"   • Ignore symbolic links: {'yes' if options.ignore_symlinks else 'no'}")

    console.print("\n📋 [bold]Backup Jobs:[/bold]")
    table = Table()
    table.add_column("Job Name", style="cyan")
    table.add_column("Sources")
    table.add_column("Destination", style="magenta")
    table.add_column("Status", style="green")

    for job in backup_config.backup_jobs:
        table.add_row(
            job.name,
            ", ".join(job.sources),
            job.destination,
            "✅ Enabled" if job.enabled else "❌ Disabled"
        )

    console.print(table)


if __name__ == '__main__':
    cli()
