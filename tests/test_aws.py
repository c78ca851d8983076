"""
Tests for boto3 session helpers.
"""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from stackpick.aws import (
    export_vault_credentials,
    is_vault_installed,
    make_session,
    make_vault_session,
    verify_connection,
)
from stackpick.errors import VaultError


class TestMakeSession:
    def test_named_profile(self):
        with patch("stackpick.aws.boto3.session.Session") as session_cls:
            make_session("dev", "eu-west-1")
        session_cls.assert_called_once_with(profile_name="dev", region_name="eu-west-1")

    def test_default_profile_uses_chain(self):
        """"default" and None both leave credential resolution to boto3."""
        with patch("stackpick.aws.boto3.session.Session") as session_cls:
            make_session("default", "us-east-1")
            make_session(None, "us-east-1")
        for call in session_cls.call_args_list:
            assert call.kwargs == {"region_name": "us-east-1"}


class TestVerifyConnection:
    def test_identity(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.return_value = {
            "Arn": "arn:aws:iam::123:user/ops",
            "Account": "123",
            "UserId": "AIDA",
            "ResponseMetadata": {},
        }
        identity = verify_connection(session)
        session.client.assert_called_once_with("sts")
        assert identity == {"Arn": "arn:aws:iam::123:user/ops", "Account": "123", "UserId": "AIDA"}

    def test_no_credentials(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.side_effect = NoCredentialsError()
        assert verify_connection(session) is None

    def test_expired_token(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.side_effect = ClientError(
            {"Error": {"Code": "ExpiredToken", "Message": "expired"}}, "GetCallerIdentity"
        )
        assert verify_connection(session) is None


VAULT_JSON = json.dumps({
    "AccessKeyId": "ASIAEXAMPLE",
    "SecretAccessKey": "secret",
    "SessionToken": "token",
    "Expiration": "2026-10-16T12:00:00Z",
})


def completed(returncode=0, stdout=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


class TestVaultCredentials:
    """Session credentials exported from aws-vault."""

    def test_export(self):
        with patch("stackpick.aws.subprocess.run", return_value=completed(stdout=VAULT_JSON)) as run:
            credentials = export_vault_credentials("prod")
        assert run.call_args[0][0] == ["aws-vault", "export", "prod", "--format", "json"]
        assert run.call_args[1]["stdout"] == subprocess.PIPE
        assert credentials["AccessKeyId"] == "ASIAEXAMPLE"

    def test_session_built_from_credentials(self):
        """Lookups get the vault session keys, not a named boto3 profile."""
        with patch("stackpick.aws.subprocess.run", return_value=completed(stdout=VAULT_JSON)), \
                patch("stackpick.aws.boto3.session.Session") as session_cls:
            session = make_vault_session("prod", "eu-west-1")
        session_cls.assert_called_once_with(
            aws_access_key_id="ASIAEXAMPLE",
            aws_secret_access_key="secret",
            aws_session_token="token",
            region_name="eu-west-1",
        )
        assert session is session_cls.return_value

    def test_export_failure(self):
        with patch("stackpick.aws.subprocess.run", return_value=completed(1)):
            with pytest.raises(VaultError) as excinfo:
                export_vault_credentials("prod")
        assert excinfo.value.profile == "prod"

    def test_missing_binary(self):
        with patch("stackpick.aws.subprocess.run", side_effect=FileNotFoundError("aws-vault")):
            with pytest.raises(VaultError):
                export_vault_credentials("prod")

    @pytest.mark.parametrize("stdout", ["not json", "[]", json.dumps({"SessionToken": "t"})])
    def test_unusable_output(self, stdout):
        with patch("stackpick.aws.subprocess.run", return_value=completed(stdout=stdout)):
            with pytest.raises(VaultError):
                export_vault_credentials("prod")

    def test_is_vault_installed(self):
        with patch("stackpick.aws.shutil.which", return_value="/usr/local/bin/aws-vault"):
            assert is_vault_installed()
        with patch("stackpick.aws.shutil.which", return_value=None):
            assert not is_vault_installed()
