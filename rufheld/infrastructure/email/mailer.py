"""
Mailer - Abstraction Layer for Transactional Email
===================================================

Provides a unified interface for sending order emails.
Currently supports SMTP (Zoho Mail). Other transports implement `Mailer`.

USAGE:
    mailer = SmtpMailer(settings.email, verify_tls=settings.is_production)
    mailer.verify()
    mailer.send(EmailMessageSpec(to="kunde@example.de", subject="...", html="<p>...</p>"))
    mailer.close()

POOLING:
- One SmtpMailer is created at startup and shared by all requests
- At most `max_connections` SMTP connections are open at once
- A connection is replaced after `max_messages_per_connection` messages
- Sends are throttled to `rate_limit` per `rate_window_seconds`
"""

import logging
import queue
import smtplib
import ssl
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, Dict, Optional

from ..config import EmailSettings

logger = logging.getLogger(__name__)

HIGH_PRIORITY_HEADERS = {
    "X-Priority": "1",
    "X-MSMail-Priority": "High",
    "Importance": "high",
}


class MailerError(Exception):
    """Base exception for mail transport errors."""
    pass


@dataclass
class EmailMessageSpec:
    """Transport-independent description of one email."""
    to: str
    subject: str
    html: str
    sender_name: Optional[str] = None
    reply_to: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


class Mailer(ABC):
    """
    Abstract base class for email transports.
    Implement this interface to add new mail backends.
    """

    @abstractmethod
    def verify(self) -> bool:
        """Check that the transport can reach its server. Returns True if usable."""
        ...

    @abstractmethod
    def send(self, message: EmailMessageSpec) -> None:
        """Send one message. Raises MailerError on failure."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources and cancel pending sends."""
        ...


class RateLimiter:
    """Allows at most `limit` acquisitions per sliding `window` seconds."""

    def __init__(
        self,
        limit: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._limit = limit
        self._window = window
        self._clock = clock
        self._sleep = sleep
        self._stamps: deque = deque()
        self._lock = threading.Lock()

    def acquire(self) -> None:
        while True:
            with self._lock:
                now = self._clock()
                while self._stamps and now - self._stamps[0] >= self._window:
                    self._stamps.popleft()
                if len(self._stamps) < self._limit:
                    self._stamps.append(now)
                    return
                wait = self._window - (now - self._stamps[0])
            self._sleep(max(wait, 0.001))


class _PooledConnection:
    """SMTP connection plus the number of messages sent over it."""

    def __init__(self, smtp: smtplib.SMTP):
        self.smtp = smtp
        self.sent = 0


class SmtpMailer(Mailer):
    """
    SMTP mail transport with a bounded connection pool.

    Connections are opened lazily. `close()` sets the shutdown event:
    sends that have not started yet fail with MailerError instead of
    holding the process open.
    """

    def __init__(
        self,
        settings: EmailSettings,
        verify_tls: bool = True,
        smtp_factory: Optional[Callable[[], smtplib.SMTP]] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self._settings = settings
        self._verify_tls = verify_tls
        self._smtp_factory = smtp_factory or self._connect
        self._rate_limiter = rate_limiter or RateLimiter(
            settings.rate_limit, settings.rate_window_seconds
        )
        self._slots = threading.BoundedSemaphore(settings.max_connections)
        self._idle: "queue.LifoQueue[_PooledConnection]" = queue.LifoQueue()
        self._shutdown = threading.Event()

    @property
    def sender_address(self) -> str:
        return self._settings.sender_address

    # ── Connection handling ────────────────────────────────────────

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self._verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        """Open and authenticate a new SMTP connection."""
        s = self._settings
        if s.secure:
            smtp = smtplib.SMTP_SSL(
                s.host, s.port, timeout=s.timeout_seconds, context=self._ssl_context()
            )
        else:
            smtp = smtplib.SMTP(s.host, s.port, timeout=s.timeout_seconds)
            smtp.starttls(context=self._ssl_context())
        smtp.login(s.user, s.password)
        return smtp

    def _checkout(self) -> _PooledConnection:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            return _PooledConnection(self._smtp_factory())

    def _checkin(self, conn: _PooledConnection) -> None:
        if self._shutdown.is_set() or conn.sent >= self._settings.max_messages_per_connection:
            self._quit(conn)
        else:
            self._idle.put(conn)

    @staticmethod
    def _quit(conn: _PooledConnection) -> None:
        try:
            conn.smtp.quit()
        except (smtplib.SMTPException, OSError):
            pass

    # ── Mailer interface ───────────────────────────────────────────

    def verify(self) -> bool:
        try:
            smtp = self._smtp_factory()
            smtp.noop()
            smtp.quit()
            logger.info("Mail server is ready to take messages")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Mail server connection failed: {e}")
            return False

    def build_message(self, message: EmailMessageSpec) -> EmailMessage:
        name = message.sender_name or self._settings.sender_name
        msg = EmailMessage()
        msg["From"] = formataddr((name, self._settings.sender_address))
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg["Reply-To"] = message.reply_to or self._settings.sender_address
        for header, value in message.headers.items():
            msg[header] = value
        msg.set_content("Diese Nachricht benötigt einen HTML-fähigen E-Mail-Client.")
        msg.add_alternative(message.html, subtype="html")
        return msg

    def send(self, message: EmailMessageSpec) -> None:
        if self._shutdown.is_set():
            raise MailerError("Mailer is shut down")

        email_message = self.build_message(message)
        self._rate_limiter.acquire()

        with self._slots:
            if self._shutdown.is_set():
                raise MailerError("Mailer is shut down")
            try:
                conn = self._checkout()
            except (smtplib.SMTPException, OSError) as e:
                raise MailerError(f"Could not connect to mail server: {e}") from e

            try:
                conn.smtp.send_message(email_message)
            except (smtplib.SMTPException, OSError) as e:
                self._quit(conn)
                raise MailerError(f"Sending to {message.to} failed: {e}") from e

            conn.sent += 1
            self._checkin(conn)

        logger.debug(f"Email sent to {message.to}: {message.subject}")

    def close(self) -> None:
        self._shutdown.set()
        while True:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                break
            self._quit(conn)
        logger.info("SMTP mailer closed")


def create_mailer(settings: EmailSettings, verify_tls: bool = True) -> Optional[Mailer]:
    """Build the SMTP mailer, or return None when no credentials are configured."""
    if not settings.enabled:
        logger.warning("Email credentials not found - email features disabled")
        return None
    logger.info(f"SMTP mailer configured for {settings.host}:{settings.port}")
    return SmtpMailer(settings, verify_tls=verify_tls)
