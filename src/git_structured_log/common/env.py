"""Environment configuration interface for git-structured-log.

This module provides a clean interface for accessing environment variables,
centralizing all environment variable access in one place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def log_level(default: str = "WARNING") -> str:
        """Get the logging level.

        Returns:
            Upper-cased level name, defaults to ``default``
        """
        return os.getenv("LOG_LEVEL", default).upper()

    @staticmethod
    def repository_path() -> Path:
        """Get the path of the repository to read history from.

        Returns:
            Repository path, defaults to the current directory
        """
        return Path(os.getenv("GIT_STRUCTURED_LOG_REPO", "."))

    @staticmethod
    def git_executable() -> str:
        """Get the git executable used for all repository access.

        Returns:
            Executable name or path, defaults to 'git'
        """
        return os.getenv("GIT_STRUCTURED_LOG_GIT", "git")


# Singleton instance for convenient access
env = Environment()
