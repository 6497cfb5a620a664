"""Unit tests for provider payload translation."""

import re

import pytest

from channelsignal.api.inbound_email.transform import (
    InvalidPayloadError,
    convert_postmark_headers,
    generate_message_id,
    transform_payload,
)


class TestResendShape:

    def test_maps_fields(self):
        payload = transform_payload({
            "type": "email.received",
            "data": {
                "email_id": "re_123",
                "from": "Jane <jane@acme.com>",
                "to": "u_abc@in.example.com",
                "cc": ["bob@acme.com"],
                "subject": "QBR",
                "text": "body",
                "html": "<p>body</p>",
                "created_at": "2026-03-01T10:00:00Z",
                "headers": {"In-Reply-To": "<root@mail>"},
            },
        })

        assert payload.message_id == "re_123"
        assert payload.from_ == "Jane <jane@acme.com>"
        assert payload.to == ["u_abc@in.example.com"]
        assert payload.cc == ["bob@acme.com"]
        assert payload.bcc == []
        assert payload.text_body == "body"
        assert payload.html_body == "<p>body</p>"
        assert payload.sent_at == "2026-03-01T10:00:00Z"
        assert payload.headers == {"in-reply-to": "<root@mail>"}

    def test_missing_subject_and_id(self):
        payload = transform_payload({
            "type": "email.received",
            "data": {"from": "jane@acme.com", "to": ["u_abc@in.example.com"]},
        })

        assert payload.subject == "(no subject)"
        assert payload.message_id


class TestPostmarkShape:

    def test_maps_fields(self):
        payload = transform_payload({
            "MessageID": "pm-1",
            "From": "jane@acme.com",
            "To": "u_abc@in.example.com, Bob <bob@acme.com>",
            "Cc": "carol@acme.com",
            "Bcc": "u_abc@in.example.com",
            "Subject": "Weekly sync",
            "TextBody": "hello",
            "HtmlBody": "<p>hello</p>",
            "Date": "Sun, 01 Mar 2026 10:00:00 +0000",
            "Headers": [
                {"Name": "In-Reply-To", "Value": "<root@mail>"},
                {"Name": "References", "Value": "<root@mail>"},
            ],
        })

        assert payload.message_id == "pm-1"
        assert payload.to == ["u_abc@in.example.com", "Bob <bob@acme.com>"]
        assert payload.cc == ["carol@acme.com"]
        assert payload.bcc == ["u_abc@in.example.com"]
        assert payload.sent_at == "Sun, 01 Mar 2026 10:00:00 +0000"
        assert payload.headers == {"in-reply-to": "<root@mail>", "references": "<root@mail>"}

    def test_detected_by_original_recipient(self):
        payload = transform_payload({
            "OriginalRecipient": "u_abc@in.example.com",
            "From": "jane@acme.com",
            "To": ["u_abc@in.example.com"],
        })

        assert payload.to == ["u_abc@in.example.com"]
        assert payload.subject == "(no subject)"


class TestGenericShape:

    def test_maps_fields_with_aliases(self):
        payload = transform_payload({
            "messageId": "gen-1",
            "from": "jane@acme.com",
            "to": "u_abc@in.example.com",
            "subject": "Hello",
            "text": "plain",
            "htmlBody": "<p>rich</p>",
            "date": "2026-03-01",
        })

        assert payload.message_id == "gen-1"
        assert payload.to == ["u_abc@in.example.com"]
        assert payload.text_body == "plain"
        assert payload.html_body == "<p>rich</p>"
        assert payload.sent_at == "2026-03-01"


class TestRejected:

    @pytest.mark.parametrize("body", [
        {},
        {"hello": "world"},
        {"from": "jane@acme.com"},
        {"type": "email.sent", "data": {}},
        ["not", "an", "object"],
        "string",
    ])
    def test_unknown_shapes(self, body):
        with pytest.raises(InvalidPayloadError):
            transform_payload(body)

    def test_missing_sender(self):
        with pytest.raises(InvalidPayloadError):
            transform_payload({"MessageID": "pm-1", "To": "u_abc@in.example.com"})

    @pytest.mark.parametrize("body", [
        {"from": "jane@acme.com", "to": ["u_abc@in.example.com"], "sentAt": 1700000000},
        {"from": "jane@acme.com", "to": ["u_abc@in.example.com"], "subject": 42},
        {"MessageID": 7, "From": "jane@acme.com", "To": "u_abc@in.example.com"},
        {"type": "email.received", "data": {
            "from": "jane@acme.com", "to": ["u_abc@in.example.com"], "html": ["<p>"],
        }},
    ])
    def test_non_string_scalar_fields(self, body):
        with pytest.raises(InvalidPayloadError):
            transform_payload(body)


class TestNonStringValuesDropped:

    def test_recipient_entries(self):
        payload = transform_payload({
            "from": "jane@acme.com",
            "to": ["u_abc@in.example.com", {"email": "bob@acme.com"}, None, 5],
            "cc": {"email": "carol@acme.com"},
        })

        assert payload.to == ["u_abc@in.example.com"]
        assert payload.cc == []

    def test_header_values(self):
        payload = transform_payload({
            "from": "jane@acme.com",
            "to": "u_abc@in.example.com",
            "headers": {"References": ["<a@b>"], "In-Reply-To": "<root@mail>"},
        })

        assert payload.headers == {"in-reply-to": "<root@mail>"}

    def test_postmark_header_entries(self):
        payload = transform_payload({
            "MessageID": "pm-1",
            "From": "jane@acme.com",
            "To": "u_abc@in.example.com",
            "Headers": [
                "In-Reply-To: <x@mail>",
                {"Name": "References", "Value": ["<a@b>"]},
                {"Name": "In-Reply-To", "Value": "<root@mail>"},
            ],
        })

        assert payload.headers == {"in-reply-to": "<root@mail>"}


def test_generate_message_id_format():
    assert re.match(r"^\d{13}-[0-9a-z]{11}$", generate_message_id())
    assert generate_message_id() != generate_message_id()


def test_convert_postmark_headers_empty():
    assert convert_postmark_headers(None) == {}
    assert convert_postmark_headers([]) == {}
