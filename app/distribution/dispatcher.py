"""Concurrent fan-out of distribution reports to friends.

One task per friend formats the report, renders it to PDF and hands it
to the mail transport.  All tasks run concurrently and the dispatcher
waits for every one of them to settle.  A single failed task makes the
whole dispatch fail; nothing is retried.

Safety: e-mail addresses are never logged, only friend names.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from app.distribution.exceptions import (
    DistributionError,
    FormattingError,
    ValidationError,
)
from app.distribution.mail_transport import MailTransport
from app.distribution.models import (
    Attachment,
    DispatchResult,
    DispatchState,
    Distribution,
    EmailTask,
    TaskOutcome,
    TaskState,
)
from app.distribution.pdf_renderer import PdfRenderer
from app.distribution.report_formatter import format_report

logger = logging.getLogger(__name__)

ATTACHMENT_FILENAME = "distribution_details.pdf"
MISSING_DATA_MESSAGE = "Missing required data."


def email_subject(friend_name: str) -> str:
    return f"Money Distribution Details for {friend_name}"


def build_tasks(
    friends: Sequence[str],
    emails: Sequence[str],
    distribution: Distribution,
) -> list[EmailTask]:
    """Pair ``friends[i]`` with ``emails[i]`` and the friend's ledger.

    Missing emails or ledgers are left as ``None``; such tasks fail when run.
    """
    return [
        EmailTask(
            friend_name=friend,
            email_address=emails[index] if index < len(emails) else None,
            ledger=distribution.get(friend),
        )
        for index, friend in enumerate(friends)
    ]


class DistributionDispatcher:
    """Format, render and email one distribution report per friend."""

    def __init__(
        self,
        renderer: PdfRenderer,
        transport: MailTransport,
        sender: str,
    ) -> None:
        self.renderer = renderer
        self.transport = transport
        self.sender = sender

    # -- single task --------------------------------------------------------

    async def run_task(self, task: EmailTask) -> TaskOutcome:
        """Run one task to ``DELIVERED`` or ``FAILED``."""
        outcome = TaskOutcome(friend_name=task.friend_name, state=TaskState.PENDING)
        try:
            if task.email_address is None:
                raise DistributionError(f"No email address for friend {task.friend_name!r}")
            if task.ledger is None:
                raise DistributionError(f"No distribution entry for friend {task.friend_name!r}")

            outcome.state = TaskState.FORMATTING
            try:
                content = format_report(task.friend_name, task.ledger)
            except (AttributeError, TypeError, ValueError) as exc:
                raise FormattingError(str(exc)) from exc

            outcome.state = TaskState.RENDERING
            pdf_bytes = await asyncio.to_thread(self.renderer.render, content)

            outcome.state = TaskState.SENDING
            await asyncio.to_thread(
                self.transport.send,
                task.email_address,
                self.sender,
                email_subject(task.friend_name),
                content,
                Attachment(filename=ATTACHMENT_FILENAME, content=pdf_bytes),
            )
        except Exception as exc:
            logger.error(
                "Report for %s failed while %s: %s",
                task.friend_name,
                outcome.state.value.lower(),
                exc,
            )
            outcome.state = TaskState.FAILED
            outcome.error = str(exc)
            return outcome

        outcome.state = TaskState.DELIVERED
        logger.info("Report for %s delivered", task.friend_name)
        return outcome

    # -- fan-out ------------------------------------------------------------

    async def dispatch(
        self,
        friends: Sequence[str] | None,
        emails: Sequence[str] | None,
        distribution: Distribution | None,
    ) -> DispatchResult:
        """Send every friend their report and return the joined outcome.

        Raises ``ValidationError`` before any task starts when *friends*,
        *emails* or *distribution* is missing or empty.
        """
        result = DispatchResult()
        if not friends or not emails or not distribution:
            raise ValidationError(MISSING_DATA_MESSAGE)

        tasks = build_tasks(friends, emails, distribution)
        result.state = DispatchState.AWAITING_ALL
        logger.info("Dispatch %s for %d distribution reports", result.state.value, len(tasks))

        result.outcomes = list(await asyncio.gather(*(self.run_task(t) for t in tasks)))

        if result.failed_tasks:
            result.state = DispatchState.FAILED
            logger.error(
                "Dispatch failed: %d of %d reports not delivered",
                len(result.failed_tasks),
                len(result.outcomes),
            )
        else:
            result.state = DispatchState.SUCCEEDED
        return result
