"""Credential-protocol records."""
from __future__ import annotations

import io

import pytest

from gitcheckout.core.credential.protocol import CredentialArguments, format_credential
from gitcheckout.core.exceptions import CredentialInputError


class TestCredentialArguments:
    def test_parse_stops_at_blank_line(self) -> None:
        stdin = io.StringIO("protocol=https\nhost=git.example.com\nusername=ci\n\nhost=ignored\n")

        record = CredentialArguments.parse(stdin)

        assert record == CredentialArguments(protocol="https", host="git.example.com", username="ci")

    def test_unknown_keys_and_crlf_are_tolerated(self) -> None:
        record = CredentialArguments.parse("protocol=https\r\nhost=h\r\ncapability[]=authtype\r\npassword=a=b\r\n")

        assert record.host == "h"
        assert record.password == "a=b"

    @pytest.mark.parametrize(
        "text",
        ["host=git.example.com\n", "protocol=https\n", "protocol= \nhost=h\n", ""],
    )
    def test_missing_protocol_or_host(self, text: str) -> None:
        with pytest.raises(CredentialInputError):
            CredentialArguments.parse(text)

    def test_to_input_skips_empty_fields(self) -> None:
        record = CredentialArguments(protocol="http", host="h", username="u")

        assert record.to_input() == "protocol=http\nhost=h\nusername=u\n\n"

    def test_password_not_in_repr(self) -> None:
        record = CredentialArguments(protocol="https", host="h", password="s3cr3t")

        assert "s3cr3t" not in repr(record)


class TestFormatCredential:
    def test_both_fields(self) -> None:
        assert format_credential("u", "p") == "username=u\npassword=p\n"

    def test_nothing_known(self) -> None:
        assert format_credential(None, "") == ""
