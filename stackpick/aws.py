"""
boto3 session construction and connection checks.
"""

import json
import logging
import shutil
import subprocess
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import VaultError

logger = logging.getLogger(__name__)


def make_session(profile: Optional[str], region: str) -> boto3.session.Session:
    """
    Build a boto3 session for the chosen profile and region.

    "default" or None uses the standard credential chain.
    """
    if profile and profile != "default":
        return boto3.session.Session(profile_name=profile, region_name=region)
    return boto3.session.Session(region_name=region)


def is_vault_installed() -> bool:
    """Check that the aws-vault binary is on PATH."""
    return shutil.which("aws-vault") is not None


def export_vault_credentials(profile: str) -> Dict[str, str]:
    """
    Fetch temporary credentials with `aws-vault export --format json`.

    stdin and stderr stay attached to the terminal so aws-vault can ask for
    an MFA code or keychain password.

    Args:
        profile: aws-vault profile name

    Returns:
        Dict with AccessKeyId, SecretAccessKey, SessionToken and Expiration

    Raises:
        VaultError: If aws-vault cannot run, fails, or prints unusable output
    """
    command = ["aws-vault", "export", profile, "--format", "json"]
    logger.debug(f"Executing: {' '.join(command)}")

    try:
        result = subprocess.run(command, stdout=subprocess.PIPE, text=True)
    except OSError as e:
        raise VaultError(profile, f"could not run aws-vault: {e}") from e

    if result.returncode != 0:
        raise VaultError(profile, f"aws-vault export exited with code {result.returncode}")

    try:
        credentials = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise VaultError(profile, f"unexpected aws-vault output: {e}") from e

    if not isinstance(credentials, dict) or not credentials.get("AccessKeyId") \
            or not credentials.get("SecretAccessKey"):
        raise VaultError(profile, "aws-vault output has no access key")

    logger.debug(f"Got aws-vault credentials for {profile}, expiring {credentials.get('Expiration')}")
    return credentials


def make_vault_session(profile: str, region: str) -> boto3.session.Session:
    """
    Build a boto3 session from aws-vault session credentials.

    Raises:
        VaultError: If the credentials could not be exported
    """
    credentials = export_vault_credentials(profile)
    return boto3.session.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials.get("SessionToken"),
        region_name=region,
    )


def verify_connection(session: boto3.session.Session) -> Optional[Dict[str, str]]:
    """
    Check credentials with sts:GetCallerIdentity.

    Returns:
        Caller identity (Arn, Account, UserId) or None on failure
    """
    try:
        identity = session.client("sts").get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        logger.warning(f"AWS connection check failed: {e}")
        return None

    return {
        "Arn": identity.get("Arn", ""),
        "Account": identity.get("Account", ""),
        "UserId": identity.get("UserId", ""),
    }
