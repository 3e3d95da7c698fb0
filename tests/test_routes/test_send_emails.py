import logging
from datetime import datetime, timezone
from typing import Generator
from unittest.mock import MagicMock

import pytest
import pytest_mock

from dataportal.crud.schema import ConnectionSubmission, PageError, SaveResult
from dataportal.routers import send_emails
from dataportal.routers.send_emails import (
    MissingEmailParamsError,
    failure_email,
    notify_submission,
    page_summaries,
    send_with_sendgrid,
    success_email,
)
from dataportal.settings import Settings

# pylint: disable=redefined-outer-name

SUBMISSION = ConnectionSubmission(
    type=None,
    user_name="Sam",
    user_email="sam@example.com",
    pages=[{"id": "1", "name": "Page One"}, {"id": "2", "name": None}],
)


@pytest.fixture
def settings(mocker: pytest_mock.MockerFixture) -> Generator[Settings, None, None]:
    settings = Settings(
        notification_email="ops@example.com",
        sendgrid_api_key="SG.key",
        sendgrid_sender_email="noreply@example.com",
        testing=False,
    )
    mocker.patch("dataportal.routers.send_emails.get_settings", return_value=settings)
    yield settings


def test_success_email(settings: Settings) -> None:
    result = SaveResult(saved_count=1, errors=[PageError(page_id="2", error="boom")])
    now = datetime(2024, 7, 1, 9, 30, tzinfo=timezone.utc)

    email = success_email(SUBMISSION, result, now)

    assert email["subject"] == "New FB Connection: 1 page(s) from Sam"
    assert email["template_name"] == "connection_success"
    data = email["template_data"]
    assert data["saved"] == 1
    assert data["total"] == 2
    assert data["method"] == "manual"
    assert data["timestamp"] == "2024-07-01T09:30:00+00:00"
    # British Summer Time
    assert data["local_time"] == "01/07/2024, 10:30:00"
    assert data["organisation"] == settings.organisation


def test_success_email_unknown_user(settings: Settings) -> None:
    submission = SUBMISSION.model_copy(update={"user_name": None, "type": "oauth"})

    email = success_email(submission, SaveResult(saved_count=2), datetime.now(timezone.utc))

    assert email["subject"] == "New FB Connection: 2 page(s) from Unknown User"
    assert email["template_data"]["method"] == "oauth"


def test_failure_email(settings: Settings) -> None:
    email = failure_email(SUBMISSION.model_copy(update={"user_name": ""}), "timeout")

    assert email["subject"] == "FB Connection FAILED - Unknown"
    assert email["template_name"] == "connection_failure"
    assert email["template_data"]["error"] == "timeout"


def test_notify_submission_success(
    mocker: pytest_mock.MockerFixture, settings: Settings
) -> None:
    mock_send = mocker.patch(
        "dataportal.routers.send_emails.send_with_sendgrid", return_value=202
    )

    notify_submission(SUBMISSION, result=SaveResult(saved_count=2))

    mock_send.assert_called_once()
    subject, template_name, template_data, recipients = mock_send.call_args.args
    assert subject == "New FB Connection: 2 page(s) from Sam"
    assert template_name == "connection_success"
    assert template_data["pages"] == [
        {"id": "1", "name": "Page One"},
        {"id": "2", "name": None},
    ]
    assert recipients == ["ops@example.com"]


def test_notify_submission_failure(
    mocker: pytest_mock.MockerFixture, settings: Settings
) -> None:
    mock_send = mocker.patch(
        "dataportal.routers.send_emails.send_with_sendgrid", return_value=202
    )

    notify_submission(SUBMISSION, error="could not connect")

    subject, template_name, template_data, _ = mock_send.call_args.args
    assert subject == "FB Connection FAILED - Sam"
    assert template_name == "connection_failure"
    assert template_data["error"] == "could not connect"


def test_notify_submission_no_recipient(
    mocker: pytest_mock.MockerFixture, caplog: pytest.LogCaptureFixture
) -> None:
    mocker.patch(
        "dataportal.routers.send_emails.get_settings",
        return_value=Settings(notification_email=None),
    )
    mock_send = mocker.patch("dataportal.routers.send_emails.send_with_sendgrid")

    with caplog.at_level(logging.WARNING):
        notify_submission(SUBMISSION, result=SaveResult(saved_count=2))

    mock_send.assert_not_called()
    assert "NOTIFICATION_EMAIL not set" in caplog.text


@pytest.mark.parametrize(
    "error",
    [
        Exception("SendGrid returned 401"),
        MissingEmailParamsError("subject", ["ops@example.com"], "None"),
    ],
)
def test_notify_submission_swallows_errors(
    mocker: pytest_mock.MockerFixture,
    settings: Settings,
    caplog: pytest.LogCaptureFixture,
    error: Exception,
) -> None:
    mocker.patch("dataportal.routers.send_emails.send_with_sendgrid", side_effect=error)

    with caplog.at_level(logging.ERROR):
        notify_submission(SUBMISSION, result=SaveResult(saved_count=2))

    assert "Notification email failed" in caplog.text


def test_send_with_sendgrid(
    mocker: pytest_mock.MockerFixture, settings: Settings
) -> None:
    mock_client = MagicMock()
    mock_client.send.return_value.status_code = 202
    mock_client_class = mocker.patch.object(
        send_emails, "SendGridAPIClient", return_value=mock_client
    )
    email = success_email(SUBMISSION, SaveResult(saved_count=2), datetime.now(timezone.utc))

    status = send_with_sendgrid(
        email["subject"], email["template_name"], email["template_data"], ["ops@example.com"]
    )

    assert status == 202
    mock_client_class.assert_called_once_with("SG.key")
    mock_client.set_sendgrid_data_residency.assert_not_called()
    message = mock_client.send.call_args.args[0].get()
    assert message["subject"] == "New FB Connection: 2 page(s) from Sam"
    assert message["from"]["email"] == "noreply@example.com"
    assert [c["type"] for c in message["content"]] == ["text/plain", "text/html"]


def test_send_with_sendgrid_data_residency(
    mocker: pytest_mock.MockerFixture, settings: Settings
) -> None:
    settings.sendgrid_data_residency = "eu"
    mock_client = MagicMock()
    mocker.patch.object(send_emails, "SendGridAPIClient", return_value=mock_client)

    send_with_sendgrid(
        "subject",
        "connection_failure",
        failure_email(SUBMISSION, "timeout")["template_data"],
        ["ops@example.com"],
    )

    mock_client.set_sendgrid_data_residency.assert_called_once_with("eu")


def test_send_with_sendgrid_missing_params(mocker: pytest_mock.MockerFixture) -> None:
    mocker.patch(
        "dataportal.routers.send_emails.get_settings",
        return_value=Settings(
            testing=False, sendgrid_api_key=None, notification_email="ops@example.com"
        ),
    )

    with pytest.raises(MissingEmailParamsError) as exc_info:
        send_with_sendgrid(
            "subject",
            "connection_failure",
            failure_email(SUBMISSION, "timeout")["template_data"],
            ["ops@example.com"],
        )

    assert exc_info.value.recipients == ["ops@example.com"]
    assert "timeout" in exc_info.value.message


def test_send_with_sendgrid_refuses_in_tests(mocker: pytest_mock.MockerFixture) -> None:
    mocker.patch(
        "dataportal.routers.send_emails.get_settings",
        return_value=Settings(testing=True, sendgrid_api_key="SG.key"),
    )

    with pytest.raises(AssertionError):
        send_with_sendgrid(
            "subject",
            "connection_failure",
            failure_email(SUBMISSION, "timeout")["template_data"],
            ["ops@example.com"],
        )


def test_page_summaries_of_malformed_pages() -> None:
    submission = ConnectionSubmission(
        pages=[{"id": 5, "name": 12345}, "not-a-page", {"name": "No id"}]
    )

    assert page_summaries(submission) == [
        {"id": "5", "name": "12345"},
        {"id": None, "name": None},
        {"id": None, "name": "No id"},
    ]
