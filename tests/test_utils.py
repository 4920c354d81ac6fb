"""Tests for webhook signature validation."""

from __future__ import annotations

import pytest
from conftest import SECRET, sign

from checksummarizer.errors import ValidationError
from checksummarizer.utils import gh_verify, validate_payload

BODY = b'{"zen": "Keep it logically awesome."}'


def test_gh_verify_sha256():
    assert gh_verify(SECRET, BODY, sign(BODY))


def test_gh_verify_sha1():
    assert gh_verify(SECRET, BODY, sign(BODY, algo="sha1"), "sha1")


def test_gh_verify_rejects_other_algorithm():
    assert not gh_verify(SECRET, BODY, sign(BODY, algo="sha1"), "sha256")
    assert not gh_verify(SECRET, BODY, sign(BODY), "sha1")


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "sha256",
        "md5=abc",
        "sha256=deadbeef",
        "sha256=\u00e9\u00e9",
        sign(BODY, secret="other"),
    ],
)
def test_gh_verify_rejects(header):
    assert not gh_verify(SECRET, BODY, header)


def test_validate_payload_returns_body():
    assert validate_payload(SECRET, BODY, sign(BODY)) == BODY


def test_validate_payload_falls_back_to_sha1():
    assert validate_payload(SECRET, BODY, None, sign(BODY, algo="sha1")) == BODY


def test_validate_payload_prefers_sha256():
    with pytest.raises(ValidationError):
        validate_payload(SECRET, BODY, "sha256=bad", sign(BODY, algo="sha1"))


def test_validate_payload_requires_a_signature():
    with pytest.raises(ValidationError, match="missing"):
        validate_payload(SECRET, BODY, None, None)


def test_validate_payload_rejects_sha1_in_sha256_header():
    with pytest.raises(ValidationError):
        validate_payload(SECRET, BODY, sign(BODY, algo="sha1"))


def test_validate_payload_rejects_non_ascii_signature():
    with pytest.raises(ValidationError, match="does not match"):
        validate_payload(SECRET, BODY, "sha256=éé")
