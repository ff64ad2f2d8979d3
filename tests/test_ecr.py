"""Tests for the ECR credential exchange."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from docker_push.ecr import (
    AwsAccessConfig,
    EcrLoginError,
    EcrRegistry,
    decode_authorization_token,
    parse_ecr_url,
)

ECR_SERVER = "123456789012.dkr.ecr.us-west-2.amazonaws.com"


def token_response(raw: str) -> dict:
    return {
        "authorizationData": [
            {
                "authorizationToken": base64.b64encode(raw.encode()).decode(),
                "proxyEndpoint": f"https://{ECR_SERVER}",
            }
        ]
    }


@pytest.fixture
def mock_session():
    with patch("docker_push.ecr.boto3.Session") as session_class:
        session = MagicMock()
        session_class.return_value = session
        yield session_class


class TestParseEcrUrl:
    @pytest.mark.parametrize(
        "url",
        [
            ECR_SERVER,
            f"https://{ECR_SERVER}",
            f"http://{ECR_SERVER}",
            f"{ECR_SERVER}/my-repo",
        ],
    )
    def test_valid_urls(self, url):
        assert parse_ecr_url(url) == EcrRegistry(account_id="123456789012", region="us-west-2")

    @pytest.mark.parametrize("url", ["registry.example.com", "ghcr.io/owner/app", ""])
    def test_invalid_urls(self, url):
        with pytest.raises(EcrLoginError, match="Failed to parse the ECR URL"):
            parse_ecr_url(url)


class TestDecodeToken:
    def test_split_on_first_colon(self):
        token = base64.b64encode(b"AWS:pass:with:colons").decode()

        assert decode_authorization_token(token) == ("AWS", "pass:with:colons")

    def test_missing_separator(self):
        token = base64.b64encode(b"no-separator").decode()

        with pytest.raises(EcrLoginError, match="user:password"):
            decode_authorization_token(token)

    def test_invalid_base64(self):
        with pytest.raises(EcrLoginError, match="undecodable"):
            decode_authorization_token("!!!not base64!!!")


class TestSession:
    def test_default_credential_chain(self, mock_session):
        AwsAccessConfig().session("us-east-1")

        mock_session.assert_called_once_with(region_name="us-east-1")

    def test_explicit_keys_and_token(self, mock_session):
        AwsAccessConfig(access_key="AKIA", secret_key="secret", token="tok").session("eu-west-1")

        mock_session.assert_called_once_with(
            region_name="eu-west-1",
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            aws_session_token="tok",
        )

    def test_profile(self, mock_session):
        AwsAccessConfig(profile="ci").session("eu-west-1")

        mock_session.assert_called_once_with(region_name="eu-west-1", profile_name="ci")


class TestEcrGetLogin:
    def test_success(self, mock_session):
        client = mock_session.return_value.client.return_value
        client.get_authorization_token.return_value = token_response("AWS:ecr-password")

        username, password = AwsAccessConfig().ecr_get_login(ECR_SERVER)

        assert (username, password) == ("AWS", "ecr-password")
        mock_session.assert_called_once_with(region_name="us-west-2")
        assert mock_session.return_value.client.call_args.args[0] == "ecr"
        client.get_authorization_token.assert_called_once_with(registryIds=["123456789012"])

    def test_invalid_url_makes_no_aws_call(self, mock_session):
        with pytest.raises(EcrLoginError):
            AwsAccessConfig().ecr_get_login("registry.example.com")

        mock_session.assert_not_called()

    def test_client_error(self, mock_session):
        client = mock_session.return_value.client.return_value
        client.get_authorization_token.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "not authorized"}},
            "GetAuthorizationToken",
        )

        with pytest.raises(EcrLoginError, match="Failed to get Authorization token from ECR: not authorized"):
            AwsAccessConfig().ecr_get_login(ECR_SERVER)

    def test_botocore_error(self, mock_session):
        client = mock_session.return_value.client.return_value
        client.get_authorization_token.side_effect = NoCredentialsError()

        with pytest.raises(EcrLoginError, match="Unable to locate credentials"):
            AwsAccessConfig().ecr_get_login(ECR_SERVER)

    def test_empty_authorization_data(self, mock_session):
        client = mock_session.return_value.client.return_value
        client.get_authorization_token.return_value = {"authorizationData": []}

        with pytest.raises(EcrLoginError, match="no authorization data"):
            AwsAccessConfig().ecr_get_login(ECR_SERVER)
