from typing import Optional

from google.cloud import secretmanager

from config.settings import GCP_PROJECT_ID


class SecretStore:
    """
    Thin wrapper over Secret Manager.

    Built once per process alongside the compute controller. The
    provisioning flow does not read any secret yet.
    """

    def __init__(
        self,
        client: Optional[secretmanager.SecretManagerServiceClient] = None,
        project: str = GCP_PROJECT_ID,
    ) -> None:
        self.client = client if client is not None else secretmanager.SecretManagerServiceClient()
        self.project = project

    def secret_path(self, secret_id: str, version: str = "latest") -> str:
        return f"projects/{self.project}/secrets/{secret_id}/versions/{version}"

    def access_secret(self, secret_id: str, version: str = "latest") -> str:
        # Value is never logged
        response = self.client.access_secret_version(
            request={"name": self.secret_path(secret_id, version)}
        )
        return response.payload.data.decode("utf-8")
