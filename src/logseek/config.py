"""Configuration management with lazy validation."""

from pathlib import Path
from functools import cached_property

from logseek.models.config import Config, GraphConfig, SearchConfig
from logseek.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "logseek" / "config.yaml"


class ConfigManager:
    """
    Configuration manager with lazy validation.

    Loads config file once and exposes its sections; section errors surface
    only when that section is first accessed.

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> graph_config = config_mgr.graph
        >>> search_config = config_mgr.search
    """

    def __init__(self, config: Config):
        self._config = config

    @classmethod
    def load_default(cls) -> "ConfigManager":
        """
        Load configuration from default path (~/.config/logseek/config.yaml).

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        logger.info("config_loading", path=str(path))

        try:
            config = Config.load(path)
            logger.info("config_loaded", path=str(path))
            return cls(config)

        except FileNotFoundError as e:
            logger.error("config_not_found", path=str(path), error=str(e))
            raise

        except Exception as e:
            logger.error("config_validation_error", path=str(path), error=str(e))
            raise ValueError(f"Configuration validation failed: {e}") from e

    @classmethod
    def for_graph(cls, graph_path: Path) -> "ConfigManager":
        """Build a configuration for a graph directory without a config file."""
        try:
            return cls(Config(graph=GraphConfig(graph_path=str(graph_path))))
        except Exception as e:
            logger.error("config_validation_error", graph_path=str(graph_path), error=str(e))
            raise ValueError(f"Configuration validation failed: {e}") from e

    @cached_property
    def graph(self) -> GraphConfig:
        """Get graph configuration."""
        return self._config.graph

    @cached_property
    def search(self) -> SearchConfig:
        """
        Get search configuration (uses defaults if not specified).

        Returns:
            Validated search configuration
        """
        return self._config.search
