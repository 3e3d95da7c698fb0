"""Tools for sending email notifications to the portal operator."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from jinja2 import Environment, PackageLoader, select_autoescape
from sendgrid import Mail, SendGridAPIClient

from dataportal.constants import DEFAULT_CONNECTION_METHOD, NOTIFICATION_TIMEZONE
from dataportal.crud.schema import ConnectionSubmission, SaveResult, submitted_page_id
from dataportal.settings import get_settings

logger = logging.getLogger(__name__)


class MissingEmailParamsError(Exception):
    """Exception for when email settings are missing."""

    def __init__(
        self,
        subject: str,
        recipients: List[str],
        from_email: str,
        message: Optional[str] = None,
    ):
        """Capture the details of an email that couldn't be sent."""
        super().__init__(f"Missing email settings to send: {subject}")
        self.subject = subject
        self.recipients = recipients
        self.from_email = from_email
        self.message = message


def render_template(template_name: str, template_data: Dict[str, Any]) -> str:
    """Renders an email body based on the provided template and data.

    Args:
        template_name : The name of template.
        template_data : The data used to render the template.

    Returns:
        The rendered template as a string.
    """
    env = Environment(
        loader=PackageLoader("dataportal", "templates/emails"),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template(template_name)
    rendered_template = template.render(**template_data)
    return rendered_template


def send_with_sendgrid(
    subject: str, template_name: str, template_data: Dict[str, Any], to_list: List[str]
) -> int:
    """Sends an email to those in to_list with subject=subject.

    Both the plain text ({template_name}.txt) and the HTML
    ({template_name}.html) templates are rendered with template_data.

    Args:
        subject : The subject of the email.
        template_name : The jinja2 template name, without its extension.
        template_data : The data passed to the templates.
        to_list : The email addresses of the recipients.

    Returns:
        The status code that indicates whether or not email was sent sucessfully.

    Raises:
        MissingEmailParamsError: raises an error if the api key or the "from" email address is missing.
    """
    plain_text = render_template(template_name + ".txt", template_data)
    html = render_template(template_name + ".html", template_data)

    settings = get_settings()

    # We don't want to send any emails if we forget to mock the function
    assert not settings.testing

    api_key = settings.sendgrid_api_key
    from_email = settings.sender_email
    if not api_key or not from_email:
        raise MissingEmailParamsError(
            subject=subject,
            recipients=to_list,
            from_email=str(from_email),
            message=plain_text,
        )

    message = Mail(
        from_email=from_email,
        to_emails=to_list,
        subject=subject,
        plain_text_content=plain_text,
        html_content=html,
    )

    logger.info("Sending an email to %s with subject=%s", to_list, subject)
    client = SendGridAPIClient(api_key)
    if settings.sendgrid_data_residency:
        client.set_sendgrid_data_residency(settings.sendgrid_data_residency)

    response = client.send(message)

    return response.status_code


def page_summaries(
    submission: ConnectionSubmission,
) -> List[Dict[str, Optional[str]]]:
    """The id and name of every submitted page, valid or not."""
    summaries = []
    for raw in submission.pages:
        name = raw.get("name") if isinstance(raw, dict) else None
        summaries.append(
            {
                "id": submitted_page_id(raw),
                "name": None if name is None else str(name),
            }
        )
    return summaries


def success_email(
    submission: ConnectionSubmission, result: SaveResult, now: datetime
) -> Dict[str, Any]:
    """The subject, template and data for a submission that was stored."""
    settings = get_settings()
    return {
        "subject": (
            f"New FB Connection: {result.saved_count} page(s) "
            f"from {submission.user_name or 'Unknown User'}"
        ),
        "template_name": "connection_success",
        "template_data": {
            "user_name": submission.user_name,
            "user_email": submission.user_email,
            "saved": result.saved_count,
            "total": len(submission.pages),
            "method": submission.type or DEFAULT_CONNECTION_METHOD,
            "timestamp": now.isoformat(),
            "local_time": now.astimezone(ZoneInfo(NOTIFICATION_TIMEZONE)).strftime(
                "%d/%m/%Y, %H:%M:%S"
            ),
            "pages": page_summaries(submission),
            "errors": result.errors,
            "organisation": settings.organisation,
        },
    }


def failure_email(submission: ConnectionSubmission, error: str) -> Dict[str, Any]:
    """The subject, template and data for a submission that couldn't be stored."""
    settings = get_settings()
    return {
        "subject": f"FB Connection FAILED - {submission.user_name or 'Unknown'}",
        "template_name": "connection_failure",
        "template_data": {
            "user_name": submission.user_name,
            "error": error,
            "pages": page_summaries(submission),
            "organisation": settings.organisation,
        },
    }


def notify_submission(
    submission: ConnectionSubmission,
    result: Optional[SaveResult] = None,
    error: Optional[str] = None,
) -> None:
    """Email the operator about a connection submission.

    Pass result if the pages were stored, or error if the store
    couldn't be reached. Failing to send is logged and otherwise
    ignored.
    """
    settings = get_settings()
    recipient = settings.notification_email
    if not recipient:
        logger.warning("NOTIFICATION_EMAIL not set")
        return

    try:
        if result is not None:
            email = success_email(submission, result, datetime.now(timezone.utc))
        else:
            email = failure_email(submission, error or "Unknown error")

        status = send_with_sendgrid(
            email["subject"], email["template_name"], email["template_data"], [recipient]
        )
        logger.info("Notification email sent with status %s", status)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Notification email failed")
