import uuid

import pytest

from src.utils.validators import MAX_MESSAGE_LENGTH, QueryValidator


def test_sanitize_collapses_whitespace():
    assert QueryValidator.sanitize_message("  flights   to\n Chennai ") == "flights to Chennai"


@pytest.mark.parametrize("message", ["", "   ", None])
def test_empty_message_rejected(message):
    with pytest.raises(ValueError, match="empty"):
        QueryValidator.sanitize_message(message)


def test_long_message_rejected():
    with pytest.raises(ValueError, match="too long"):
        QueryValidator.sanitize_message("a" * (MAX_MESSAGE_LENGTH + 1))


@pytest.mark.parametrize(
    "message",
    ["<script>alert(1)</script>", "javascript:void(0)", "<img onerror=x>", "eval(x)"],
)
def test_malicious_content_rejected(message):
    with pytest.raises(ValueError, match="malicious"):
        QueryValidator.sanitize_message(message)


def test_validate_session_id():
    assert QueryValidator.validate_session_id(str(uuid.uuid4()))
    assert QueryValidator.validate_session_id("")
    assert QueryValidator.validate_session_id(None)
    assert not QueryValidator.validate_session_id("not-a-session")
