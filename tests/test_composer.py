# =============================================================================
# MessageComposer Tests
# =============================================================================

import pytest

from mailtask.core import AttachmentSpec, ResolvedMailParams, SmtpConfig
from mailtask.errors import AttachmentReadError
from mailtask.smtp import MessageComposer


def _mail(**overrides):
    values = dict(
        to=["a@x.com", "b@x.com"],
        from_address="r@x.com",
        subject="Hi",
        is_html=False,
        body="Hello",
        smtp=SmtpConfig(host="h", port=25),
        attachments=[],
    )
    values.update(overrides)
    return ResolvedMailParams(**values)


class TestSinglePart:

    def test_plain_text(self, workspace):
        msg = MessageComposer().compose(_mail(), workspace)

        assert not msg.is_multipart()
        assert msg.get_content_type() == "text/plain"
        assert msg.get_content_charset() == "utf-8"
        assert msg.get_payload(decode=True).decode("utf-8") == "Hello"

    def test_html(self, workspace):
        msg = MessageComposer().compose(_mail(is_html=True, body="<p>Hello</p>"), workspace)
        assert msg.get_content_type() == "text/html"

    def test_non_ascii_body(self, workspace):
        msg = MessageComposer().compose(_mail(body="Grüße"), workspace)
        assert msg.get_payload(decode=True).decode("utf-8") == "Grüße"


class TestHeaders:

    def test_addresses_and_subject(self, workspace):
        msg = MessageComposer().compose(_mail(), workspace)

        assert msg["From"] == "r@x.com"
        assert msg["Sender"] == "r@x.com"
        assert msg["To"] == "a@x.com, b@x.com"
        assert msg["Subject"] == "Hi"

    def test_message_id_uses_sender_domain(self, workspace):
        msg = MessageComposer().compose(_mail(from_address="Reports <r@reports.example>"), workspace)
        assert msg["Message-ID"].endswith("@reports.example>")
        assert msg["Date"]


class TestMultipart:

    def test_body_first_then_attachments_in_order(self, workspace):
        attachments = [
            AttachmentSpec(path="reports/q1.csv", content_type="text/csv"),
            AttachmentSpec(path="logo.png", content_type="image/png", filename="brand.png"),
        ]
        msg = MessageComposer().compose(_mail(attachments=attachments), workspace)

        assert msg.get_content_type() == "multipart/mixed"
        parts = msg.get_payload()
        assert [p.get_content_type() for p in parts] == ["text/plain", "text/csv", "image/png"]
        assert parts[0].get_payload(decode=True).decode("utf-8") == "Hello"
        assert parts[1].get_filename() == "q1.csv"
        assert parts[1].get_payload(decode=True) == b"quarter,total\nq1,100\n"
        assert parts[2].get_filename() == "brand.png"
        assert parts[2]["Content-Transfer-Encoding"] == "base64"

    def test_html_body_in_multipart(self, workspace):
        msg = MessageComposer().compose(
            _mail(is_html=True, attachments=[AttachmentSpec(path="logo.png")]), workspace
        )
        parts = msg.get_payload()
        assert parts[0].get_content_type() == "text/html"
        assert parts[1].get_content_type() == "application/octet-stream"

    def test_missing_attachment(self, workspace):
        with pytest.raises(AttachmentReadError) as exc_info:
            MessageComposer().compose(_mail(attachments=[AttachmentSpec(path="missing.pdf")]), workspace)
        assert exc_info.value.path == "missing.pdf"
