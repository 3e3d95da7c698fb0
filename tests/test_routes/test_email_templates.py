from datetime import datetime, timezone
from typing import Generator

import pytest
import pytest_mock
from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from dataportal.crud.schema import ConnectionSubmission, PageError, SaveResult
from dataportal.routers.send_emails import failure_email, render_template, success_email
from dataportal.settings import Settings

# pylint: disable=redefined-outer-name

SUBMISSION = ConnectionSubmission(
    type="oauth",
    user_name="Sam <script>",
    user_email=None,
    pages=[
        {"id": "101", "name": "Corner Cafe"},
        {"id": "102", "name": None},
    ],
)


@pytest.fixture(autouse=True)
def settings(mocker: pytest_mock.MockerFixture) -> None:
    mocker.patch(
        "dataportal.routers.send_emails.get_settings",
        return_value=Settings(organisation="Test Org"),
    )


@pytest.fixture()
def jinja2_environment() -> Generator[Environment, None, None]:
    yield Environment(
        loader=PackageLoader("dataportal", "templates/emails"),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html"]),
    )


def test_success_emails_render(jinja2_environment: Environment) -> None:
    result = SaveResult(saved_count=1, errors=[PageError(page_id="102", error="boom")])
    email = success_email(SUBMISSION, result, datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc))

    text = jinja2_environment.get_template("connection_success.txt").render(
        **email["template_data"]
    )
    html = jinja2_environment.get_template("connection_success.html").render(
        **email["template_data"]
    )

    assert "Name: Sam <script>" in text
    assert "Email: N/A" in text
    assert "Pages: 1/2" in text
    assert "Method: oauth" in text
    assert "Time: 2024-01-15T08:00:00+00:00" in text
    assert "  - Corner Cafe (ID: 101)" in text
    assert "  - Unknown (ID: 102)" in text
    assert "1 error(s)" in text

    assert "Sam &lt;script&gt;" in html
    assert "<script>" not in html
    assert "1 / 2" in html
    assert "15/01/2024, 08:00:00" in html
    assert "<strong>Corner Cafe</strong>" in html
    assert "1 error(s)" in html
    assert "Test Org" in html


def test_success_emails_render_without_errors(jinja2_environment: Environment) -> None:
    email = success_email(
        SUBMISSION, SaveResult(saved_count=2), datetime.now(timezone.utc)
    )

    text = jinja2_environment.get_template("connection_success.txt").render(
        **email["template_data"]
    )
    html = jinja2_environment.get_template("connection_success.html").render(
        **email["template_data"]
    )

    assert "All saved successfully." in text
    assert "All pages saved to Redshift successfully." in html


def test_failure_emails_render(jinja2_environment: Environment) -> None:
    email = failure_email(SUBMISSION, "password authentication failed")

    text = jinja2_environment.get_template("connection_failure.txt").render(
        **email["template_data"]
    )
    html = jinja2_environment.get_template("connection_failure.html").render(
        **email["template_data"]
    )

    assert "Error: password authentication failed" in text
    assert "Pages attempted: 2" in text
    assert "Connection Failed" in html
    assert "password authentication failed" in html
    assert "ID: 101" in html


def test_render_template() -> None:
    email = failure_email(SUBMISSION, "timeout")

    assert render_template("connection_failure.txt", email["template_data"]).startswith(
        "FAILED"
    )
