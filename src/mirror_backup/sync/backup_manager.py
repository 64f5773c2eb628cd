"""Backup manager running configured jobs through the engine."""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config.settings import BackupConfig, BackupJobConfig
from ..errors import BackupError
from .backup_engine import BackupEngine
from .reporter import ConsoleReporter, Reporter
from .results import JobStatus

# Module logger
logger = logging.getLogger(__name__)


class BackupManager:
    """Main backup manager that orchestrates the backup process."""

    def __init__(self, config: BackupConfig, reporter: Optional[Reporter] = None):
        """Initialize backup manager.

        Args:
            config: Backup configuration
            reporter: Receives per-entry lines (console by default)
        """
        self.config = config
        self.reporter = reporter or ConsoleReporter()

    def create_engine(self, job_config: BackupJobConfig) -> BackupEngine:
        """Build an engine for a job and validate its paths.

        Raises:
            ArgumentError: if a source or the destination is invalid
        """
        options = self.config.sync_options
        engine = BackupEngine(dry_run=options.dry_run, reporter=self.reporter)
        engine.mark_deleted_files = options.mark_deleted_files
        engine.ignore_symlinks = options.ignore_symlinks
        engine.chunk_size = options.chunk_size

        for source_path in job_config.sources:
            engine.add_source(source_path)
        engine.set_destination(job_config.destination)
        return engine

    def run_backup_job(self, job_config: BackupJobConfig,
                       cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
        """Run a single backup job.

        Args:
            job_config: Configuration for the backup job
            cancel_event: Stops an ongoing copy when set

        Returns:
            Dictionary with backup results
        """
        logger.info(f"Starting backup job: {job_config.name}")
        start_time = datetime.now()

        results = {
            'job_name': job_config.name,
            'start_time': start_time,
            'status': 'started',
            'dry_run': self.config.sync_options.dry_run,
            'files_processed': 0,
            'files_created': 0,
            'files_updated': 0,
            'files_unchanged': 0,
            'files_marked_deleted': 0,
            'files_deleted': 0,
            'files_skipped': 0,
            'bytes_transferred': 0,
            'errors': []
        }

        engine = None
        try:
            engine = self.create_engine(job_config)
            status = engine.run(cancel_event)
            results['status'] = 'completed' if status is JobStatus.SUCCESS else 'completed_with_errors'

        except BackupError as e:
            logger.error(f"Backup job {job_config.name} failed: {e}")
            results['status'] = 'failed'
            results['errors'].append(str(e))

        finally:
            if engine is not None:
                summary = engine.summary
                results['files_processed'] = summary.files_processed
                results['files_created'] = summary.created
                results['files_updated'] = summary.updated
                results['files_unchanged'] = summary.unchanged
                results['files_marked_deleted'] = summary.marked_deleted
                results['files_deleted'] = summary.deleted
                results['files_skipped'] = summary.skipped
                results['bytes_transferred'] = summary.bytes_copied
                results['errors'] = summary.errors + results['errors']
            results['end_time'] = datetime.now()
            results['duration'] = (results['end_time'] - start_time).total_seconds()
            logger.info(f"Backup job {job_config.name} finished in {results['duration']:.2f} seconds")

        return results

    def run_all_jobs(self, cancel_event: Optional[threading.Event] = None) -> List[Dict[str, Any]]:
        """Run all enabled backup jobs.

        Returns:
            List of job results
        """
        enabled_jobs = self.config.get_enabled_jobs()
        logger.info(f"Running {len(enabled_jobs)} backup jobs")

        results = []
        for job in enabled_jobs:
            results.append(self.run_backup_job(job, cancel_event))
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Backup cancelled, remaining jobs skipped")
                break

        return results

    def get_backup_summary(self, results: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Generate summary of backup results.

        Args:
            results: List of job results

        Returns:
            Summary dictionary
        """
        return {
            'total_jobs': len(results),
            'successful_jobs': len([r for r in results if r.get('status') == 'completed']),
            'failed_jobs': len([r for r in results if r.get('status') != 'completed']),
            'total_files_processed': sum(r.get('files_processed', 0) for r in results),
            'total_files_created': sum(r.get('files_created', 0) for r in results),
            'total_files_updated': sum(r.get('files_updated', 0) for r in results),
            'total_files_marked_deleted': sum(r.get('files_marked_deleted', 0) for r in results),
            'total_files_deleted': sum(r.get('files_deleted', 0) for r in results),
            'total_files_skipped': sum(r.get('files_skipped', 0) for r in results),
            'total_bytes_transferred': sum(r.get('bytes_transferred', 0) for r in results),
            'total_errors': sum(len(r.get('errors', [])) for r in results),
            'backup_time': datetime.now().isoformat()
        }
