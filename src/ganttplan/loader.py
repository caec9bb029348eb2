"""Project file loading and config discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from . import context
from .config import CONFIG_FILENAME, PlanConfig, load_config
from .exceptions import ParseError, ValidationError
from .models import Link, Project, Task, TaskConstraint
from .schemas import ProjectSchema


def discover_config(
    project_path: Path,
    config_path: Path | None = None,
) -> PlanConfig | None:
    """Discover the config file from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Project file directory / ganttplan_config.yaml
    4. Current directory / ganttplan_config.yaml
    """
    # 1. Explicit argument
    if config_path and config_path.exists():
        return load_config(config_path)

    # 2. Global context
    ctx_config = context.get_config_path()
    if ctx_config and ctx_config.exists():
        return load_config(ctx_config)

    # 3. Project file directory
    dir_config = Path(project_path).parent / CONFIG_FILENAME
    if dir_config.exists():
        return load_config(dir_config)

    # 4. Current directory
    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return None


def parse_project(data: dict[str, Any]) -> Project:
    """Convert loaded YAML data into domain objects.

    Raises:
        ValidationError: If the data does not match the project schema
    """
    try:
        schema = ProjectSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid project structure: {e}") from e

    tasks = [
        Task(
            id=task.id,
            name=task.name,
            start=task.start,
            end=task.end,
            duration=task.duration,
            parent=task.parent,
            constraints=tuple(TaskConstraint(c.type, c.date) for c in task.constraints),
        )
        for task in schema.tasks
    ]
    links = [
        Link(source=link.source, target=link.target, type=link.type, lag=link.lag, id=link.id)
        for link in schema.links
    ]
    return Project(tasks=tasks, links=links)


def load_project(path: Path | str) -> Project:
    """Load a project YAML file.

    Args:
        path: Path to a YAML file with ``tasks`` and ``links`` lists

    Returns:
        Project with tasks and links in file order

    Raises:
        ParseError: If the file is missing or is not a YAML mapping
        ValidationError: If the contents do not match the project schema
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    return parse_project(data)  # type: ignore[arg-type]
