"""AWS ECR credential exchange for registry login.

This module turns an ECR registry URL plus optional AWS access settings into a
short-lived username/password pair usable with `docker login`.

Usage:
    from docker_push.ecr import AwsAccessConfig

    access = AwsAccessConfig(profile="ci")
    username, password = access.ecr_get_login("123456789012.dkr.ecr.us-east-1.amazonaws.com")
"""

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Optional

import boto3
import structlog
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from .errors import DockerPushError

logger = structlog.get_logger(__name__)

ECR_URL_RE = re.compile(r"(?:http://|https://|)([0-9]*)\.dkr\.ecr\.(.*)\.amazonaws\.com.*")


class EcrLoginError(DockerPushError):
    """Raised when ECR credentials cannot be obtained."""


@dataclass(frozen=True)
class EcrRegistry:
    """Account and region parsed from an ECR registry URL."""

    account_id: str
    region: str


def parse_ecr_url(ecr_url: str) -> EcrRegistry:
    """Extract account ID and region from an ECR registry URL.

    Args:
        ecr_url: Registry URL such as 123456789012.dkr.ecr.us-east-1.amazonaws.com

    Raises:
        EcrLoginError: If the URL does not look like an ECR registry
    """
    match = ECR_URL_RE.fullmatch(ecr_url)
    if not match:
        raise EcrLoginError(
            f"Failed to parse the ECR URL: {ecr_url}",
            "It should be on the form <account number>.dkr.ecr.<region>.amazonaws.com",
        )
    return EcrRegistry(account_id=match.group(1), region=match.group(2))


def decode_authorization_token(token: str) -> tuple[str, str]:
    """Decode a base64 `user:password` ECR authorization token."""
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise EcrLoginError("ECR returned an undecodable authorization token", details=str(e)) from e

    username, sep, password = decoded.partition(":")
    if not sep:
        raise EcrLoginError("ECR authorization token is not in user:password form")
    return username, password


@dataclass
class AwsAccessConfig:
    """AWS credential settings used for the ECR exchange.

    Empty values fall through to the default boto3 credential chain
    (environment, shared config, instance role).

    Attributes:
        access_key: Explicit access key ID
        secret_key: Explicit secret access key (sensitive)
        token: Session token for temporary credentials (sensitive)
        profile: Named profile from the shared AWS config
    """

    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    token: str = field(default="", repr=False)
    profile: str = ""

    def session(self, region: str) -> boto3.Session:
        """Create a boto3 session for the given region from these settings."""
        kwargs: dict[str, Optional[str]] = {"region_name": region}
        if self.access_key and self.secret_key:
            kwargs["aws_access_key_id"] = self.access_key
            kwargs["aws_secret_access_key"] = self.secret_key
            if self.token:
                kwargs["aws_session_token"] = self.token
        if self.profile:
            kwargs["profile_name"] = self.profile
        return boto3.Session(**kwargs)

    def ecr_get_login(self, ecr_url: str) -> tuple[str, str]:
        """Fetch a registry username and password from ECR.

        Args:
            ecr_url: ECR registry URL used as the login server

        Returns:
            Tuple of (username, password)

        Raises:
            EcrLoginError: If the URL is malformed or ECR refuses the request
        """
        registry = parse_ecr_url(ecr_url)

        logger.info(
            "Getting ECR token",
            account_id=registry.account_id,
            region=registry.region,
            has_access_key=bool(self.access_key),
            profile=self.profile or None,
        )

        try:
            client = self.session(registry.region).client(
                "ecr",
                config=BotocoreConfig(
                    retries={"max_attempts": 3, "mode": "standard"},
                    connect_timeout=5,
                    read_timeout=10,
                ),
            )
            response = client.get_authorization_token(registryIds=[registry.account_id])
        except ClientError as e:
            error = e.response.get("Error", {})
            raise EcrLoginError(
                f"Failed to get Authorization token from ECR: {error.get('Message', str(e))}",
                "Ensure the credentials allow ecr:GetAuthorizationToken",
                f"Account: {registry.account_id}, Region: {registry.region}",
            ) from e
        except BotoCoreError as e:
            raise EcrLoginError(
                f"Failed to get Authorization token from ECR: {e}",
                "Check AWS credentials and profile settings",
            ) from e

        auth_data = response.get("authorizationData") or []
        if not auth_data:
            raise EcrLoginError(
                "ECR returned no authorization data",
                details=f"Account: {registry.account_id}, Region: {registry.region}",
            )

        username, password = decode_authorization_token(auth_data[0]["authorizationToken"])
        logger.info("Successfully got login for ECR", login_server=ecr_url)
        return username, password
