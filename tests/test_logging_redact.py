from edgeworker.util.logging import redact


def test_redacts_tracker_and_agent_tokens():
    text = (
        "linear=lin_api_abc123 github=ghp_XYZ987 slack=xoxb-1-2-abc "
        "anthropic=sk-ant-api03-secret auth=Bearer abc.def"
    )
    redacted = redact(text)
    for secret in ["lin_api_abc123", "ghp_XYZ987", "xoxb-1-2-abc", "sk-ant-api03-secret", "abc.def"]:
        assert secret not in redacted
    assert "Bearer [REDACTED]" in redacted


def test_redacts_explicit_secrets():
    assert redact("token hunter2 here", extra_secrets=["hunter2", ""]) == "token [REDACTED] here"


def test_plain_text_is_untouched():
    assert redact("3 tests failing in skip-list.ts") == "3 tests failing in skip-list.ts"
