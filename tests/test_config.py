from __future__ import annotations

from pathlib import Path

import pytest

from mmadmin.config import DEFAULT_PAGE_SIZE, load_config
from mmadmin.errors import SecretReferenceError
from mmadmin.secrets import SecretRef, parse_reference, resolve_secret


def test_loads_defaults() -> None:
    config = load_config({"MMADMIN_URL": "https://chat.example.com", "MMADMIN_TOKEN": "tok"})

    assert config.server.api_url == "https://chat.example.com/api/v4"
    assert config.server.token == "tok"
    assert config.server.timeout == 30.0
    assert config.server.max_retries == 3
    assert config.page_size == DEFAULT_PAGE_SIZE == 200
    assert config.output.format == "plain"
    assert config.output.log_level == "WARNING"


def test_overrides_from_environment() -> None:
    config = load_config({
        "MMADMIN_URL": "https://chat.example.com/",
        "MMADMIN_TOKEN": "tok",
        "MMADMIN_TIMEOUT": "2.5",
        "MMADMIN_MAX_RETRIES": "0",
        "MMADMIN_PAGE_SIZE": "50",
        "MMADMIN_FORMAT": "JSON",
        "LOG_LEVEL": "debug",
        "LOG_FORMAT": "json",
    })

    assert config.server.api_url == "https://chat.example.com/api/v4"
    assert config.server.timeout == 2.5
    assert config.server.max_retries == 0
    assert config.page_size == 50
    assert config.output.format == "json"
    assert config.output.log_format == "json"


@pytest.mark.parametrize(
    "env, message",
    [
        ({"MMADMIN_TOKEN": "tok"}, "MMADMIN_URL"),
        ({"MMADMIN_URL": "https://chat.example.com"}, "MMADMIN_TOKEN"),
        ({"MMADMIN_URL": "u", "MMADMIN_TOKEN": "t", "MMADMIN_PAGE_SIZE": "0"}, "MMADMIN_PAGE_SIZE"),
        ({"MMADMIN_URL": "u", "MMADMIN_TOKEN": "t", "MMADMIN_FORMAT": "xml"}, "MMADMIN_FORMAT"),
    ],
)
def test_invalid_configuration(env, message) -> None:
    with pytest.raises(ValueError, match=message):
        load_config(env)


def test_token_can_come_from_a_file(tmp_path: Path) -> None:
    token_file = tmp_path / "token"
    token_file.write_text("s3cret\n", encoding="utf-8")

    config = load_config({"MMADMIN_URL": "u", "MMADMIN_TOKEN": f"file://{token_file}"})

    assert config.server.token == "s3cret"


def test_empty_token_file_is_rejected(tmp_path: Path) -> None:
    token_file = tmp_path / "token"
    token_file.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="empty"):
        resolve_secret(f"file://{token_file}")


def test_literal_secret_is_returned_as_is() -> None:
    assert resolve_secret("plain-token") == "plain-token"


def test_aws_secret_reference_reads_json_key(monkeypatch: pytest.MonkeyPatch) -> None:
    import boto3

    class FakeSecretsClient:
        def get_secret_value(self, SecretId):
            assert SecretId == "mattermost/admin"
            return {"SecretString": '{"token": "from-aws"}'}

    monkeypatch.setattr(boto3, "client", lambda service, region_name=None: FakeSecretsClient())

    assert resolve_secret("aws-secret://mattermost/admin#token") == "from-aws"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("plain-token", None),
        ("https://not-a-secret", None),
        ("aws-secret://mattermost/admin#token", SecretRef("aws-secret", "mattermost/admin", "token")),
        ("gcp-secret://mm-token", SecretRef("gcp-secret", "mm-token")),
        ("file:///run/secrets/mm#1", SecretRef("file", "/run/secrets/mm#1")),
    ],
)
def test_parse_reference(value, expected) -> None:
    assert parse_reference(value) == expected


def test_missing_token_file_names_the_variable(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(SecretReferenceError, match="MMADMIN_TOKEN") as excinfo:
        load_config({"MMADMIN_URL": "u", "MMADMIN_TOKEN": f"file://{missing}"})
    assert isinstance(excinfo.value, ValueError)
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_aws_client_error_is_a_secret_reference_error(monkeypatch: pytest.MonkeyPatch) -> None:
    import boto3
    from botocore.exceptions import ClientError

    class DeniedSecretsClient:
        def get_secret_value(self, SecretId):
            raise ClientError(
                {"Error": {"Code": "AccessDeniedException", "Message": "denied"}},
                "GetSecretValue",
            )

    monkeypatch.setattr(boto3, "client", lambda service, region_name=None: DeniedSecretsClient())

    with pytest.raises(SecretReferenceError, match="AccessDeniedException"):
        resolve_secret("aws-secret://mattermost/admin")


def test_aws_missing_json_key(monkeypatch: pytest.MonkeyPatch) -> None:
    import boto3

    class FakeSecretsClient:
        def get_secret_value(self, SecretId):
            return {"SecretString": '{"other": "x"}'}

    monkeypatch.setattr(boto3, "client", lambda service, region_name=None: FakeSecretsClient())

    with pytest.raises(SecretReferenceError, match="no key 'token'"):
        resolve_secret("aws-secret://mattermost/admin#token")


def test_gcp_secret_uses_project_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    from google.cloud import secretmanager

    requested: list[str] = []

    class FakePayload:
        data = b"from-gcp\n"

    class FakeResponse:
        payload = FakePayload()

    class FakeSecretManager:
        def access_secret_version(self, request):
            requested.append(request["name"])
            return FakeResponse()

    monkeypatch.setenv("GCP_PROJECT_ID", "chat-prod")
    monkeypatch.setattr(secretmanager, "SecretManagerServiceClient", FakeSecretManager)

    assert resolve_secret("gcp-secret://mm-token#3") == "from-gcp"
    assert requested == ["projects/chat-prod/secrets/mm-token/versions/3"]
