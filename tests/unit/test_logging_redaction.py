import logging

from order_harvest.utils.logging_redaction import RedactingFilter, install_redaction_filter, redact_message


def test_redacts_idtoken_header_and_json_tokens():
    message = redact_message("headers={'Idtoken': 'eyJhbGci.abc'} body={\"refreshToken\": \"r-123\"}")
    assert "eyJhbGci.abc" not in message
    assert "r-123" not in message
    assert "[REDACTED]" in message


def test_redacts_bearer():
    assert redact_message("Authorization: Bearer abc.def") == "Authorization: Bearer [REDACTED]"


def test_plain_messages_untouched():
    assert redact_message("Processing batch 1 of 3 (5 requests)...") == "Processing batch 1 of 3 (5 requests)..."


def test_filter_rewrites_record():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "idToken=%s", ("abc123",), None)
    assert RedactingFilter().filter(record)
    assert record.getMessage() == "idToken=[REDACTED]"


def test_install_is_idempotent():
    install_redaction_filter()
    install_redaction_filter()
    root = logging.getLogger()
    assert sum(isinstance(f, RedactingFilter) for f in root.filters) == 1
