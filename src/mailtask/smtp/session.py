# =============================================================================
# SMTP Session Factory
# =============================================================================
# Translates a resolved SmtpConfig into aiosmtplib connection settings and
# opens the session.
#
# Security modes:
#   ssl=True        implicit TLS from connect (use_tls). If the handshake
#                   fails the send fails; there is no plaintext fallback.
#   start_tls=True  plaintext connect, upgraded with STARTTLS when the
#                   server advertises it (aiosmtplib start_tls=None)
#   both False      plaintext
#
# Timeouts are fixed: 10 seconds to connect, 60 seconds for every read or
# write after that.
# =============================================================================

import logging
from collections.abc import AsyncIterator, Callable, Iterator
from email.message import Message
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field

import aiosmtplib

from mailtask.core import SmtpConfig

logger = logging.getLogger(__name__)

# Server replies are traced on this logger when a session has debug set
PROTOCOL_LOGGER = "mailtask.smtp.protocol"


@dataclass(frozen=True)
class SessionParams:
    """
    Connection settings for one SMTP session.

    Attributes:
        hostname: Server to connect to.
        port: Server port.
        use_tls: Implicit TLS from connect.
        start_tls: True to require STARTTLS, None to use it when offered,
                   False to never use it.
        connect_timeout: Seconds allowed for the TCP/TLS connect.
        timeout: Seconds allowed for each command after connecting.
        debug: Trace the SMTP conversation to the log.
        authenticator: Callback returning (username, password), or None
                       for an anonymous session.
    """
    hostname: str
    port: int
    use_tls: bool
    start_tls: bool | None
    connect_timeout: float
    timeout: float
    debug: bool = False
    authenticator: Callable[[], tuple[str, str]] | None = field(default=None, repr=False)

    @property
    def requires_auth(self) -> bool:
        return self.authenticator is not None


class SessionFactory:
    """
    Builds and opens SMTP sessions.

    Usage:
        >>> factory = SessionFactory()
        >>> params = factory.session_params(smtp_config)
        >>> async with factory.open(params) as session:
        ...     await session.send_message(message)
    """

    # Not configurable per task
    CONNECT_TIMEOUT = 10.0
    TIMEOUT = 60.0

    def session_params(self, config: SmtpConfig) -> SessionParams:
        """Translate an SmtpConfig into connection settings."""
        if config.ssl:
            # Already encrypted from connect, never layer STARTTLS on top
            start_tls: bool | None = False
        elif config.start_tls:
            start_tls = None
        else:
            start_tls = False

        authenticator = None
        if config.username is not None:
            authenticator = _credentials(config.username, config.password or "")

        return SessionParams(
            hostname=config.host,
            port=config.port,
            use_tls=config.ssl,
            start_tls=start_tls,
            connect_timeout=self.CONNECT_TIMEOUT,
            timeout=self.TIMEOUT,
            debug=config.debug,
            authenticator=authenticator,
        )

    @asynccontextmanager
    async def open(self, params: SessionParams) -> AsyncIterator["SmtpSession"]:
        """
        Connect, authenticate if required, and yield the session.

        The connection is closed on exit.

        Raises:
            aiosmtplib.SMTPException: On connect, TLS, auth or timeout errors.
            OSError: On socket-level failures.
        """
        with protocol_trace(params.debug) as trace:
            logger.info(f"Connecting to SMTP {params.hostname}:{params.port}")

            client = aiosmtplib.SMTP(
                hostname=params.hostname,
                port=params.port,
                use_tls=params.use_tls,
                start_tls=params.start_tls,
                timeout=params.timeout,
            )
            response = await client.connect(timeout=params.connect_timeout)
            logger.debug("SMTP connection established")
            trace.reply("connect", response)
            trace.extensions(client.esmtp_extensions)

            try:
                if params.authenticator is not None:
                    username, password = params.authenticator()
                    logger.debug(f"Authenticating as {username}")
                    response = await client.login(username, password)
                    logger.debug("SMTP authentication successful")
                    trace.reply(f"AUTH {username}", response)
                yield SmtpSession(client, trace)
            finally:
                await _disconnect(client)


class SmtpSession:
    """
    An open, authenticated SMTP session.

    Attributes:
        client: The connected aiosmtplib client.
        trace: Protocol trace for this session.
    """

    def __init__(self, client: aiosmtplib.SMTP, trace: "ProtocolTrace") -> None:
        self.client = client
        self.trace = trace

    async def send_message(self, message: Message) -> None:
        refused, reply = await self.client.send_message(message)
        self.trace.sent(refused, reply)


def _credentials(username: str, password: str) -> Callable[[], tuple[str, str]]:
    def authenticator() -> tuple[str, str]:
        return username, password
    return authenticator


async def _disconnect(client: aiosmtplib.SMTP) -> None:
    """Close the session, logging rather than raising on failure."""
    if not client.is_connected:
        return
    try:
        logger.debug("Disconnecting from SMTP")
        await client.quit()
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.warning(f"Error during SMTP disconnect: {e}")
        client.close()


class ProtocolTrace:
    """
    Logs the server side of the SMTP conversation at DEBUG.

    Every method is a no-op unless the trace is enabled. Passwords never
    reach the trace; only server replies and the login name do.
    """

    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled
        self.logger = logging.getLogger(PROTOCOL_LOGGER)

    def reply(self, command: str, response: aiosmtplib.SMTPResponse) -> None:
        if self.enabled:
            self.logger.debug(f"{command}: {response.code} {response.message}")

    def extensions(self, extensions: dict[str, str]) -> None:
        if self.enabled:
            self.logger.debug(f"EHLO extensions: {', '.join(sorted(extensions)) or 'none'}")

    def sent(self, refused: dict[str, aiosmtplib.SMTPResponse], reply: str) -> None:
        if not self.enabled:
            return
        for recipient, response in refused.items():
            self.logger.debug(f"RCPT {recipient} refused: {response.code} {response.message}")
        self.logger.debug(f"DATA: {reply}")


@contextmanager
def protocol_trace(enabled: bool) -> Iterator[ProtocolTrace]:
    """Yield a trace, raising its logger to DEBUG for the block when enabled."""
    trace = ProtocolTrace(enabled)
    if not enabled:
        yield trace
        return

    previous = trace.logger.level
    trace.logger.setLevel(logging.DEBUG)
    try:
        yield trace
    finally:
        trace.logger.setLevel(previous)
