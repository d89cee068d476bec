# =============================================================================
# Mail Sender
# =============================================================================
# Runs one mail task from start to finish:
#
#   Start ─▶ ConfigResolved ─▶ Composed ─▶ SessionOpened ─▶ Sent
#     │            │               │              │
#     └────────────┴───────────────┴──────────────┴──▶ Failed
#
# There are no retries here. Every failure is raised as a TaskExecutionError
# whose kind tells the workflow engine what went wrong:
#   configuration  missing/invalid settings, never worth retrying
#   attachment     a workspace file couldn't be read
#   template       the body template couldn't be read
#   transport      connect, TLS, auth, timeout or send failure
# =============================================================================

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from email.errors import MessageError
from email.message import Message
from enum import Enum
from typing import Any

import aiosmtplib

from mailtask.config import SystemConfig
from mailtask.errors import (
    AttachmentReadError,
    BodyTemplateError,
    ConfigurationError,
    TaskExecutionError,
)
from mailtask.rendering import StringTemplateEngine, TemplateEngine, render_body
from mailtask.resolve import MAIL_SECRET_ACCESS, ConfigResolver, TaskParams
from mailtask.secrets import SecretProvider
from mailtask.smtp.composer import MessageComposer
from mailtask.smtp.session import SessionFactory, SessionParams
from mailtask.workspace import Workspace

logger = logging.getLogger(__name__)


class SendState(Enum):
    """Progress of one send."""
    START = "start"
    CONFIG_RESOLVED = "config_resolved"
    COMPOSED = "composed"
    SESSION_OPENED = "session_opened"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class SendProgress:
    """Per-invocation state tracker. Never shared between tasks."""
    state: SendState = SendState.START

    def advance(self, state: SendState) -> None:
        logger.debug(f"Send state {self.state.value} -> {state.value}")
        self.state = state


@dataclass(frozen=True)
class SendResult:
    """
    Outcome of a successful send.

    Attributes:
        message_id: Message-ID header of the sent message.
        recipients: Addresses the message was sent to.
        smtp: The endpoint used, e.g. ``smtp.example.com:587 (user)``.
        state: Always SendState.SENT.
    """
    message_id: str
    recipients: list[str] = field(default_factory=list)
    smtp: str = ""
    state: SendState = SendState.SENT


class MailSender:
    """
    The mail task: resolve, compose, connect, send.

    One MailSender is built at startup from the frozen SystemConfig and is
    safe to share between concurrently running tasks; all per-task state
    lives on the stack of run().

    Usage:
        >>> sender = MailSender(SystemConfig.load())
        >>> sender.run(task_params, KeyringSecretProvider(), LocalWorkspace(root))
        SendResult(message_id='<...@example.com>', ...)

    Attributes:
        SECRET_ACCESS: Which keys the task may read as secrets, for the
                       host's access-control layer.
    """

    SECRET_ACCESS = MAIL_SECRET_ACCESS

    def __init__(
        self,
        system_config: SystemConfig,
        template_engine: TemplateEngine | None = None,
        session_factory: SessionFactory | None = None,
        composer: MessageComposer | None = None,
    ) -> None:
        """
        Initialize the sender.

        Args:
            system_config: Process-wide defaults and system SMTP endpoint.
            template_engine: Renders the body. Defaults to ${name} substitution.
            session_factory: Opens SMTP sessions.
            composer: Builds MIME messages.
        """
        self.system_config = system_config
        self.resolver = ConfigResolver(system_config)
        self.template_engine = template_engine or StringTemplateEngine()
        self.session_factory = session_factory or SessionFactory()
        self.composer = composer or MessageComposer()

    def run(
        self,
        params: Mapping[str, Any],
        secrets: SecretProvider,
        workspace: Workspace,
    ) -> SendResult:
        """
        Send one email. Blocks until the message is sent or the send fails.

        Args:
            params: The task's parameters.
            secrets: The task's "mail" secret scope.
            workspace: The task's file workspace.

        Returns:
            SendResult describing the sent message.

        Raises:
            TaskExecutionError: On any failure.
        """
        progress = SendProgress()
        task_params = TaskParams(params, secrets, self.SECRET_ACCESS)

        try:
            body = render_body(task_params, workspace, self.template_engine)
            mail = self.resolver.resolve(task_params, body)
            progress.advance(SendState.CONFIG_RESOLVED)

            message = self.composer.compose(mail, workspace)
            progress.advance(SendState.COMPOSED)
        except ConfigurationError as e:
            raise self._fail(progress, "configuration", str(e), e) from e
        except AttachmentReadError as e:
            raise self._fail(progress, "attachment", str(e), e) from e
        except BodyTemplateError as e:
            raise self._fail(progress, "template", str(e), e) from e

        session = self.session_factory.session_params(mail.smtp)
        try:
            asyncio.run(self._transmit(session, message, progress))
        except (aiosmtplib.SMTPException, MessageError, OSError) as e:
            raise self._fail(
                progress, "transport", f"Failed to send mail via {mail.smtp}: {e}", e
            ) from e

        progress.advance(SendState.SENT)
        logger.info(f"Mail sent: {message['Message-ID']} to {', '.join(mail.to)}")

        return SendResult(
            message_id=message["Message-ID"],
            recipients=list(mail.to),
            smtp=str(mail.smtp),
        )

    async def _transmit(self, session: SessionParams, message: Message, progress: SendProgress) -> None:
        async with self.session_factory.open(session) as smtp:
            progress.advance(SendState.SESSION_OPENED)
            logger.info(f"Sending email to {message['To']}")
            await smtp.send_message(message)

    def _fail(
        self,
        progress: SendProgress,
        kind: str,
        message: str,
        cause: BaseException,
    ) -> TaskExecutionError:
        logger.error(f"Mail task failed in state {progress.state.value} ({kind}): {message}")
        progress.advance(SendState.FAILED)
        return TaskExecutionError(kind, message, cause)
