"""Access-token references.

``MMADMIN_TOKEN`` may hold the token itself or point at where it lives::

    aws-secret://NAME[#JSON_KEY]
    gcp-secret://NAME[#VERSION]        (project from GCP_PROJECT_ID or ADC)
    gcp-secret://projects/P/secrets/NAME/versions/V
    file:///path/to/token              (first line)

Every lookup failure surfaces as ``SecretReferenceError``, which is also a
``ValueError`` so configuration loading reports it like any other bad value.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mmadmin.errors import SecretReferenceError

logger = logging.getLogger("mmadmin.secrets")

SCHEMES = ("aws-secret", "gcp-secret", "file")


@dataclass(frozen=True)
class SecretRef:
    scheme: str
    name: str
    key: str = ""

    def __str__(self) -> str:
        suffix = f"#{self.key}" if self.key else ""
        return f"{self.scheme}://{self.name}{suffix}"


def parse_reference(value: str) -> Optional[SecretRef]:
    """Split ``scheme://name#key``; literals return None."""
    scheme, sep, rest = value.partition("://")
    if not sep or scheme not in SCHEMES:
        return None
    if scheme == "file":
        return SecretRef(scheme, rest)
    name, _, key = rest.partition("#")
    return SecretRef(scheme, name, key)


def resolve_secret(value: str, source: str = "MMADMIN_TOKEN") -> str:
    ref = parse_reference(value)
    if ref is None:
        return value
    if not ref.name:
        raise SecretReferenceError(source, str(ref), "empty secret name")
    resolver = _RESOLVERS[ref.scheme]
    logger.debug("Resolving %s from %s", source, ref.scheme)
    return resolver(ref, source)


def _aws(ref: SecretRef, source: str) -> str:
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError

    region = os.environ.get("AWS_REGION", "us-east-1")
    try:
        client = boto3.client("secretsmanager", region_name=region)
        secret_string = client.get_secret_value(SecretId=ref.name)["SecretString"]
    except (BotoCoreError, ClientError) as exc:
        raise SecretReferenceError(source, str(ref), str(exc)) from exc
    except KeyError as exc:
        raise SecretReferenceError(source, str(ref), "secret has no string value") from exc

    if not ref.key:
        return secret_string
    try:
        return str(json.loads(secret_string)[ref.key])
    except ValueError as exc:
        raise SecretReferenceError(source, str(ref), "secret is not a JSON object") from exc
    except (KeyError, TypeError) as exc:
        raise SecretReferenceError(source, str(ref), f"no key '{ref.key}' in secret") from exc


def _gcp_name(ref: SecretRef) -> str:
    if ref.name.startswith("projects/"):
        return ref.name
    project = os.environ.get("GCP_PROJECT_ID", "")
    if not project:
        import google.auth

        _, project = google.auth.default()
    if not project:
        raise ValueError("no GCP project; set GCP_PROJECT_ID")
    return f"projects/{project}/secrets/{ref.name}/versions/{ref.key or 'latest'}"


def _gcp(ref: SecretRef, source: str) -> str:
    from google.api_core.exceptions import GoogleAPIError
    from google.auth.exceptions import DefaultCredentialsError
    from google.cloud import secretmanager

    try:
        name = _gcp_name(ref)
        client = secretmanager.SecretManagerServiceClient()
        response = client.access_secret_version(request={"name": name})
    except (GoogleAPIError, DefaultCredentialsError, ValueError) as exc:
        raise SecretReferenceError(source, str(ref), str(exc)) from exc
    return response.payload.data.decode("UTF-8").strip()


def _file(ref: SecretRef, source: str) -> str:
    path = Path(ref.name).expanduser()
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise SecretReferenceError(source, str(ref), exc.strerror or str(exc)) from exc
    if not lines or not lines[0].strip():
        raise SecretReferenceError(source, str(ref), "token file is empty")
    return lines[0].strip()


_RESOLVERS = {"aws-secret": _aws, "gcp-secret": _gcp, "file": _file}
