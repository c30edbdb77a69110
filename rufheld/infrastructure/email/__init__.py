from .mailer import (
    EmailMessageSpec,
    HIGH_PRIORITY_HEADERS,
    Mailer,
    MailerError,
    RateLimiter,
    SmtpMailer,
    create_mailer,
)
from .templates import (
    admin_notification_message,
    customer_confirmation_message,
    reviewer_name,
    review_text,
    stars_label,
    diagnostic_email_message,
)

__all__ = [
    "EmailMessageSpec",
    "HIGH_PRIORITY_HEADERS",
    "Mailer",
    "MailerError",
    "RateLimiter",
    "SmtpMailer",
    "admin_notification_message",
    "create_mailer",
    "customer_confirmation_message",
    "reviewer_name",
    "review_text",
    "stars_label",
    "diagnostic_email_message",
]
