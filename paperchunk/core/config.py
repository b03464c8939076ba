"""
Environment settings and configuration management
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


class Config:
    """Application settings"""

    # Model input quota in tokens (unset: detected or fallback)
    INPUT_QUOTA = _optional_int(os.getenv("INPUT_QUOTA"))

    # Chunk size settings
    MIN_CHUNK_SIZE = int(os.getenv("MIN_CHUNK_SIZE", "500"))

    # Table split thresholds (characters)
    SMALL_TABLE_THRESHOLD = int(os.getenv("SMALL_TABLE_THRESHOLD", "800"))
    MEDIUM_TABLE_THRESHOLD = int(os.getenv("MEDIUM_TABLE_THRESHOLD", "2000"))

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @property
    def input_quota(self):
        """Model input quota in tokens"""
        return self.INPUT_QUOTA

    @property
    def min_chunk_size(self):
        """Lower bound for the derived max chunk size"""
        return self.MIN_CHUNK_SIZE

    @property
    def small_table_threshold(self):
        """Tables below this size are never split"""
        return self.SMALL_TABLE_THRESHOLD

    @property
    def medium_table_threshold(self):
        """Tables below this size are split only when they crowd the budget"""
        return self.MEDIUM_TABLE_THRESHOLD

    @property
    def log_level(self):
        return self.LOG_LEVEL

    @classmethod
    def validate(cls) -> List[str]:
        """Validate settings and return the list of problems found."""
        errors = []

        if cls.INPUT_QUOTA is not None and cls.INPUT_QUOTA <= 0:
            errors.append("INPUT_QUOTA must be greater than 0.")

        if cls.MIN_CHUNK_SIZE <= 0:
            errors.append("MIN_CHUNK_SIZE must be greater than 0.")

        if cls.SMALL_TABLE_THRESHOLD <= 0:
            errors.append("SMALL_TABLE_THRESHOLD must be greater than 0.")

        if cls.MEDIUM_TABLE_THRESHOLD <= 0:
            errors.append("MEDIUM_TABLE_THRESHOLD must be greater than 0.")

        if cls.SMALL_TABLE_THRESHOLD > cls.MEDIUM_TABLE_THRESHOLD:
            errors.append(
                "SMALL_TABLE_THRESHOLD must be less than or equal to MEDIUM_TABLE_THRESHOLD."
            )

        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"LOG_LEVEL has an unknown value: {cls.LOG_LEVEL}")

        return errors

    @classmethod
    def print_config(cls):
        """Print the current settings."""
        print("Current settings:")
        print(f"  Input quota (tokens): {cls.INPUT_QUOTA if cls.INPUT_QUOTA else 'auto'}")
        print(f"  Min chunk size: {cls.MIN_CHUNK_SIZE}")
        print(f"  Small table threshold: {cls.SMALL_TABLE_THRESHOLD}")
        print(f"  Medium table threshold: {cls.MEDIUM_TABLE_THRESHOLD}")
        print(f"  Log level: {cls.LOG_LEVEL}")


def validate_config(config: Config) -> None:
    """
    Validate a configuration.

    Args:
        config: Config instance

    Raises:
        ValueError: If the configuration is invalid
    """
    errors = config.validate()
    if errors:
        error_message = "Configuration errors found:\n" + "\n".join(
            f"  - {error}" for error in errors
        )
        raise ValueError(error_message)
