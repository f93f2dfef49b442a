"""Manual and scheduled invocation of email ingestion.

Manual triggers are acknowledged immediately and the run continues on a
worker thread. Scheduled runs go through every mail-enabled user one after
another on the calling thread. Both paths call the same run_for_user().
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import structlog

from moneytracker.config import settings
from moneytracker.domain.email_ingestion import EmailIngestionService, IngestionResult
from moneytracker.domain.errors import NotConfiguredError, NotFoundError
from moneytracker.domain.user import UserService

logger = structlog.get_logger()

STARTED = "started"
NOT_CONFIGURED = "not_configured"
ERROR = "error"

STARTED_MESSAGE = "Email parsing started. You will receive notifications when complete."


@dataclass
class TriggerResponse:
    """Acknowledgment of a manual trigger.

    ``future`` is set only when status is "started" and resolves to the
    run's IngestionResult, or None if the run crashed.
    """

    status: str
    message: str
    future: Optional[Future] = None

    @property
    def started(self) -> bool:
        return self.status == STARTED


class IngestionRunner:
    """Runs email ingestion for manual triggers and scheduled sweeps."""

    def __init__(
        self,
        ingestion_service: EmailIngestionService,
        user_service: Optional[UserService] = None,
        max_workers: Optional[int] = None,
        run_timeout: Optional[float] = None,
    ):
        """Initialize the runner.

        Args:
            ingestion_service: Service performing one user's run
            user_service: User service (defaults to one over the ingestion service's db)
            max_workers: Worker threads for manual triggers (defaults to settings)
            run_timeout: Default seconds wait() blocks for (defaults to settings)
        """
        self.ingestion_service = ingestion_service
        self.user_service = user_service or UserService(ingestion_service.db)
        self.run_timeout = settings.scan_run_timeout_seconds if run_timeout is None else run_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.scan_max_workers,
            thread_name_prefix="mail-scan",
        )

    def trigger(self, user_id: int) -> TriggerResponse:
        """Start a background run for one user.

        Configuration is checked before anything is submitted, so a user
        without a usable mailbox gets an immediate reply and no run.
        """
        try:
            self.user_service.require_mail_configured(user_id)
        except NotConfiguredError as e:
            return TriggerResponse(status=NOT_CONFIGURED, message=str(e))
        except NotFoundError as e:
            return TriggerResponse(status=ERROR, message=str(e))

        future = self._executor.submit(self._run_in_background, user_id)
        logger.info("email_scan_triggered", user_id=user_id)
        return TriggerResponse(status=STARTED, message=STARTED_MESSAGE, future=future)

    def wait(
        self, response: TriggerResponse, timeout: Optional[float] = None
    ) -> Optional[IngestionResult]:
        """Block until a triggered run finishes.

        Returns:
            The run's result, or None if nothing was started or the run crashed

        Raises:
            concurrent.futures.TimeoutError: If the run outlasts the timeout
        """
        if response.future is None:
            return None
        return response.future.result(timeout=self.run_timeout if timeout is None else timeout)

    def run_scheduled(self) -> list[IngestionResult]:
        """Run every mail-enabled user in turn.

        A user whose run raises is logged and skipped.
        """
        users = self.user_service.list_mail_enabled_users()
        logger.info("scheduled_scan_started", users=len(users))

        results = []
        for user in users:
            try:
                results.append(self.ingestion_service.run_for_user(user.id))
            except Exception:
                logger.exception("scheduled_scan_user_failed", user_id=user.id)

        logger.info(
            "scheduled_scan_finished",
            users=len(users),
            completed=sum(1 for r in results if r.succeeded),
            persisted=sum(r.persisted for r in results),
        )
        return results

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting triggers, optionally waiting for running ones."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "IngestionRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    def _run_in_background(self, user_id: int) -> Optional[IngestionResult]:
        try:
            result = self.ingestion_service.run_for_user(user_id)
        except Exception:
            logger.exception("email_scan_crashed", user_id=user_id)
            return None
        finally:
            self.ingestion_service.db.disconnect()

        logger.info(
            "email_scan_completed",
            user_id=user_id,
            state=result.state.value,
            persisted=result.persisted,
            skipped=result.skipped,
        )
        return result
