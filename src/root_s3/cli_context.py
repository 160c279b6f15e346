"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
Client, avoiding global state and enabling proper dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from .client import Client
from .settings import DEFAULT_URL, Settings, create_settings_from_env


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Holds the connection options given on the command line together with the
    settings loaded from the environment, and builds the Client from them on
    first use.
    """
    settings: Settings
    project_id: int
    api_key: str = field(repr=False)
    url: str = DEFAULT_URL
    _client: Optional[Client] = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls,
        *,
        project_id: int,
        api_key: str,
        url: str = DEFAULT_URL,
        organisation_id: Optional[int] = None,
    ) -> CLIContext:
        """
        Create CLI context from command options and environment variables.

        Args:
            organisation_id: Overrides ROOTS3_ORG_ID when given

        Returns:
            CLIContext with settings loaded from environment

        Raises:
            ValueError: If an environment setting or the organisation id is invalid
        """
        settings = create_settings_from_env()
        if organisation_id is not None:
            settings = replace(settings, organisation_id=organisation_id)
        return cls(settings=settings, project_id=project_id, api_key=api_key, url=url)

    @property
    def client(self) -> Client:
        """
        Get or create the Client (lazy initialization).

        Returns:
            Client bound to the context's URL, API key and project

        Raises:
            ConfigurationError: If the URL, API key or project id is invalid
        """
        if self._client is None:
            self._client = Client(self.url, self.api_key, self.project_id, settings=self.settings)
        return self._client
