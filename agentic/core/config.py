"""
Configuration management for the Agentic user service.

Reads environment variables and an optional .env file to configure the
model endpoint, the user directory and the HTTP server.
"""

import os
import logging
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("config")

# Load .env file if available
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    logger.debug("Loaded .env file from %s", env_path)
else:
    # Also try loading from current directory
    load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """
    Centralized configuration for the Agentic user service.

    Reads from environment variables with sensible defaults.
    """

    # Model Configuration
    AI_ENABLED: bool = _flag("AI_ENABLED", "true")
    AI_MODEL_ID: str = os.getenv("AI_MODEL_ID", "llama3.1")
    AI_ENDPOINT: str = os.getenv("AI_ENDPOINT", "http://localhost:11434/v1")
    AI_API_KEY: str = os.getenv("AI_API_KEY", "ollama")
    AI_TIMEOUT: float = float(os.getenv("AI_TIMEOUT", "600.0"))
    AI_MAX_TOOL_ROUNDS: int = int(os.getenv("AI_MAX_TOOL_ROUNDS", "5"))

    # User Directory Configuration
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "agentic.db")

    # Server Configuration
    SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def get_user_directory(cls, path: Optional[str] = None):
        """
        Build the user directory backing both the REST API and the agent.

        Args:
            path: Optional database path overriding DATABASE_PATH

        Returns:
            SqliteUserDirectory instance
        """
        from agentic.core.users.directory import SqliteUserDirectory
        db_path = path or cls.DATABASE_PATH
        logger.info("Using SQLite user directory: %s", db_path)
        return SqliteUserDirectory(db_path)

    @classmethod
    def print_config(cls):
        """Print current configuration (useful for debugging)."""
        print("\nAgentic Configuration:")
        print(f"  AI: {'enabled' if cls.AI_ENABLED else 'disabled (fallback agent only)'}")
        if cls.AI_ENABLED:
            print(f"    Endpoint: {cls.AI_ENDPOINT}")
            print(f"    Model: {cls.AI_MODEL_ID}")
            print(f"    Timeout: {cls.AI_TIMEOUT}s")
            print(f"    Max tool rounds: {cls.AI_MAX_TOOL_ROUNDS}")
        print(f"  Database: {cls.DATABASE_PATH}")
        print(f"  Server: {cls.SERVER_HOST}:{cls.SERVER_PORT}")
        print(f"  Log level: {cls.LOG_LEVEL}")
        print()
