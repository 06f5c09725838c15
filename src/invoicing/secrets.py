# src/invoicing/secrets.py

import logging

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager

from src.invoicing.errors import ConfigLoadError

logger = logging.getLogger(__name__)


def get(project_id: str, secret_id: str, version: str) -> bytes:
    """
    Access one version of a Secret Manager secret and return its raw bytes.
    """
    name = f"projects/{project_id}/secrets/{secret_id}/versions/{version}"

    try:
        client = secretmanager.SecretManagerServiceClient()
    except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
        logger.error("Failed to set up Secret Manager client: %s", e)
        raise ConfigLoadError(f"failed to setup client: {e}") from e

    try:
        response = client.access_secret_version(request={"name": name})
    except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
        logger.error("Failed to access secret version %s: %s", name, e)
        raise ConfigLoadError(f"failed to access secret version: {e}") from e

    return response.payload.data


def read_local(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        logger.error("Failed to read local config %s: %s", path, e)
        raise ConfigLoadError(f"failed to read config file {path}: {e}") from e
