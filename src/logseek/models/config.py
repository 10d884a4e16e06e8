"""Configuration models for Logseek."""

from pydantic import BaseModel, Field, field_validator
from pathlib import Path
import yaml


MAX_SEARCH_RESULTS = 20


class GraphConfig(BaseModel):
    """Configuration for Logseq graph location and file filtering."""

    graph_path: str = Field(
        ...,
        description="Path to Logseq graph directory"
    )

    ignored_patterns: list[str] = Field(
        default_factory=list,
        description="Extra glob patterns to exclude (in addition to .logseq/**, .git/**, ...)"
    )

    allowed_extensions: list[str] = Field(
        default_factory=list,
        description="Extra file extensions to allow (in addition to .md, .markdown, .txt)"
    )

    @field_validator('graph_path')
    @classmethod
    def validate_graph_path(cls, v: str) -> str:
        """Validate graph path exists and is a directory."""
        path = Path(v).expanduser()
        if not path.exists():
            raise ValueError(
                f"Graph path does not exist: {path}\n"
                f"Please create the directory or update config.yaml"
            )
        if not path.is_dir():
            raise ValueError(
                f"Graph path is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return str(path)

    model_config = {"frozen": True}


class SearchConfig(BaseModel):
    """Configuration for block search defaults."""

    default_limit: int = Field(
        default=5,
        ge=1,
        le=MAX_SEARCH_RESULTS,
        description="Number of results returned when no limit is given"
    )

    task_limit: int = Field(
        default=20,
        ge=1,
        le=MAX_SEARCH_RESULTS,
        description="Number of task results returned when no limit is given"
    )

    case_sensitive: bool = Field(
        default=False,
        description="Match case when searching"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for Logseek application."""

    graph: GraphConfig = Field(..., description="Logseq graph settings")
    search: SearchConfig = Field(default_factory=SearchConfig, description="Search settings")

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Please create the file with the following format:\n\n"
                f"graph:\n"
                f"  graph_path: ~/Documents/logseq-graph\n\n"
                f"search:\n"
                f"  default_limit: 5\n"
            )

        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a YAML mapping")

        return cls(**data)

    model_config = {"frozen": True}
