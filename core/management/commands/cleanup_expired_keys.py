"""
Django management command to remove expired keys from the key document.

This command should be run periodically (e.g., via cron or scheduled task).
"""

import asyncio
import logging

from django.core.management.base import BaseCommand, CommandError

from access_keys.application.commands.cleanup_keys import CleanupKeysCommand
from access_keys.application.handlers.cleanup_keys_handler import CleanupKeysHandler
from access_keys.infrastructure.repositories import build_key_repository
from access_keys.ports.document_store import StoreError
from core.domain.exceptions import DomainException

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to remove expired keys."""

    help = "Remove expired keys from the key document"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - count expired keys without writing",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        try:
            handler = CleanupKeysHandler(key_repository=build_key_repository())
            result = asyncio.run(
                handler.handle(CleanupKeysCommand(dry_run=dry_run, trigger="command"))
            )
        except (DomainException, StoreError) as e:
            logger.error("Cleanup command failed: %s", e.message)
            raise CommandError(f"Cleanup failed: {e.message}") from e

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            self.stdout.write(
                f"Found {result.deleted_count} expired key(s), "
                f"{result.remaining_keys} would remain"
            )
            return

        if not result.deleted_count:
            # pylint: disable=no-member
            self.stdout.write(self.style.SUCCESS("No expired keys to remove"))
            return

        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(
                f"Removed {result.deleted_count} expired key(s), "
                f"{result.remaining_keys} remaining"
            )
        )
