#!/usr/bin/env python3
"""
Example script demonstrating how to use the Mirror Backup Tool.

This script shows how to:
1. Load the configuration
2. Initialize the backup manager
3. Run backup jobs (forced to dry-run)
4. Handle errors and logging
"""

import sys
from pathlib import Path

# Add src to Python path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent / "src"))

from mirror_backup.config.settings import BackupConfig
from mirror_backup.sync.backup_manager import BackupManager
from mirror_backup.utils.logging import setup_logging


def main():
    """Main example function."""
    print("🚀 Mirror Backup Tool - Example Run")
    print("=" * 60)

    setup_logging(log_level="INFO", log_file=Path("logs") / "example_run.log")

    config_path = Path("config/config.yaml")
    print(f"📝 Loading configuration from {config_path}")

    if not config_path.exists():
        print("❌ Configuration file not found!")
        print("💡 Run the following command to create one:")
        print("   python -m mirror_backup.cli init")
        return 1

    backup_config = BackupConfig.from_yaml(config_path)
    backup_config.sync_options.dry_run = True

    enabled_jobs = backup_config.get_enabled_jobs()
    print(f"✅ Loaded configuration with {len(enabled_jobs)} enabled jobs")
    for job in enabled_jobs:
        print(f"     • {job.name}: {', '.join(job.sources)} -> {job.destination}")

    print("\n🔍 Simulating backup...\n")
    backup_manager = BackupManager(backup_config)
    results = backup_manager.run_all_jobs()

    summary = backup_manager.get_backup_summary(results)
    print("\n📊 Summary:")
    print(f"   • Jobs: {summary['total_jobs']} ({summary['failed_jobs']} with problems)")
    print(f"   • Would create: {summary['total_files_created']}")
    print(f"   • Would update: {summary['total_files_updated']}")
    print(f"   • Would remove: {summary['total_files_marked_deleted'] + summary['total_files_deleted']}")

    for result in results:
        for error in result['errors']:
            print(f"   ⚠️ {result['job_name']}: {error}")

    return 0 if summary['failed_jobs'] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
