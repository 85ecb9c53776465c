from typing import Any

import pytest
import requests

from anonchat.services import verification_service
from anonchat.services.verification_service import RecaptchaVerifier


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self._body = body if body is not None else {}
        self.text = str(body)

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _FakeSiteverify:
    def __init__(self) -> None:
        self.response = _FakeResponse(body={"success": True})
        self.calls: list = []

    def __call__(self, url, data=None, timeout=None):
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        return self.response


@pytest.fixture
def siteverify(monkeypatch: pytest.MonkeyPatch) -> _FakeSiteverify:
    fake = _FakeSiteverify()
    monkeypatch.setattr(verification_service.requests, "post", fake)
    return fake


def test_without_secret_verification_is_bypassed_in_dev() -> None:
    assert RecaptchaVerifier(secret_key="").verify("anything") is True


def test_without_secret_verification_fails_when_required() -> None:
    assert RecaptchaVerifier(secret_key="", require_secret=True).verify("anything") is False


def test_missing_token_is_rejected_without_calling_google(siteverify: _FakeSiteverify) -> None:
    verifier = RecaptchaVerifier(secret_key="s3cret")

    assert verifier.verify("   ") is False
    assert verifier.verify(None) is False
    assert siteverify.calls == []


def test_successful_siteverify(siteverify: _FakeSiteverify) -> None:
    verifier = RecaptchaVerifier(secret_key="s3cret", timeout=3)

    assert verifier.verify(" token ") is True
    assert siteverify.calls == [{
        "url": verification_service.DEFAULT_VERIFY_URL,
        "data": {"secret": "s3cret", "response": "token"},
        "timeout": 3,
    }]


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(body={"success": False, "error-codes": ["invalid-input-response"]}),
        _FakeResponse(status_code=500, body={"success": True}),
        _FakeResponse(body=ValueError("not json")),
    ],
)
def test_rejected_or_broken_responses_fail(siteverify: _FakeSiteverify, response: _FakeResponse) -> None:
    siteverify.response = response

    assert RecaptchaVerifier(secret_key="s3cret").verify("token") is False


def test_network_error_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*_args, **_kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(verification_service.requests, "post", fake_post)

    assert RecaptchaVerifier(secret_key="s3cret").verify("token") is False


def test_from_config_reads_flask_style_mapping() -> None:
    verifier = RecaptchaVerifier.from_config({
        "RECAPTCHA_SECRET_KEY": "abc",
        "RECAPTCHA_TIMEOUT_SECONDS": 2,
        "REQUIRE_RECAPTCHA": True,
    })

    assert verifier.secret_key == "abc"
    assert verifier.timeout == 2
    assert verifier.require_secret is True
    assert verifier.verify_url == verification_service.DEFAULT_VERIFY_URL
