"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from burnbox.domain.events import (
    BlobDeletionFailedEvent,
    BurnConsumedEvent,
    BurnCreatedEvent,
    BurnRetiredEvent,
    DomainEvent,
    DownloadRejectedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, BurnCreatedEvent):
                self._handle_created(event)
            elif isinstance(event, BurnConsumedEvent):
                self._handle_consumed(event)
            elif isinstance(event, DownloadRejectedEvent):
                self._handle_rejected(event)
            elif isinstance(event, BurnRetiredEvent):
                self._handle_retired(event)
            elif isinstance(event, BlobDeletionFailedEvent):
                self._handle_blob_deletion_failed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_created(self, event: BurnCreatedEvent) -> None:
        self.logger.info(
            f"Burn created: burn_id={event.aggregate_id}, short_code={event.short_code}, "
            f"tier={event.tier}, max_downloads={event.max_downloads}, "
            f"expires_at={event.expires_at.isoformat()}"
        )

    def _handle_consumed(self, event: BurnConsumedEvent) -> None:
        remaining = "unlimited" if event.remaining_downloads is None else event.remaining_downloads
        self.logger.info(
            f"Burn downloaded: burn_id={event.aggregate_id}, "
            f"count={event.download_count}, remaining={remaining}"
        )

    def _handle_rejected(self, event: DownloadRejectedEvent) -> None:
        self.logger.warning(
            f"Download rejected: burn_id={event.aggregate_id}, reason={event.reason}"
        )

    def _handle_retired(self, event: BurnRetiredEvent) -> None:
        self.logger.info(
            f"Burn retired: burn_id={event.aggregate_id}, reason={event.reason}, "
            f"blob_deleted={event.blob_deleted}"
        )

    def _handle_blob_deletion_failed(self, event: BlobDeletionFailedEvent) -> None:
        """Orphaned blobs need manual cleanup, so this is an error."""
        self.logger.error(
            f"Blob deletion failed: burn_id={event.aggregate_id}, "
            f"storage_key={event.storage_key}, error={event.error_message}"
        )
