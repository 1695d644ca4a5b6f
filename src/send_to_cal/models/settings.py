"""CalDAV connection settings."""

from pydantic import BaseModel


class CalDavSettings(BaseModel):
    """Server URL and credentials for a CalDAV calendar collection."""

    server_url: str
    username: str
    password: str

    model_config = {"frozen": True}

    @property
    def collection_url(self) -> str:
        """Server URL guaranteed to end with a slash."""
        if self.server_url.endswith("/"):
            return self.server_url
        return f"{self.server_url}/"
