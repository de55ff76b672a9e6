#!/usr/bin/env python3
"""
Provisioning service client.

Thin wrapper over the provider's REST API. Every call authenticates with the
credentials of the student it is made for, so the client itself holds no
per-user state and is safe to share between request threads.
"""

import logging
from typing import Any, Dict, Optional

import requests

from training_server.services.deployment_models import RemoteApplication

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    """Raised when the provisioning service cannot be reached or refuses a call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProvisioningClient:
    """Fetches applications from the provisioning service."""

    def __init__(self, base_url: str, timeout: float = 30, verify_ssl: bool = True):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def _get_json(self, path: str, username: str, password: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            with requests.Session() as session:
                session.auth = (username, password)
                session.headers.update({'Accept': 'application/json'})
                session.verify = self.verify_ssl
                response = session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Provisioning request GET {path} as {username} failed: {e}")
            raise ProvisioningError(f"Request to provisioning service failed: {e}") from e

        if response.status_code >= 400:
            logger.warning("Provisioning request GET %s as %s returned HTTP %s",
                           path, username, response.status_code)
            raise ProvisioningError(
                f"Provisioning service returned HTTP {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProvisioningError(f"Provisioning service returned invalid JSON for {path}") from e

    def get_app(self, app_id: str, username: str, password: str) -> RemoteApplication:
        """Fetch one application, including its deployment, as the given user.

        Raises:
            ProvisioningError: On transport errors, HTTP errors or non-JSON bodies
            InvalidDeploymentError: If the payload lacks required fields
        """
        if not username or not password:
            raise ProvisioningError(f"Missing provisioning credentials for app {app_id}")

        logger.debug("Fetching application %s as %s", app_id, username)
        data = self._get_json(f"/applications/{app_id}", username, password)
        return RemoteApplication.from_dict(data)
