"""Configuration loading and Pydantic models for httpext."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server binding and runtime configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    log_format: str = "text"
    shutdown_timeout: int = 30


class CORSConfig(BaseModel):
    """Cross-origin policy configuration.

    A ``"*"`` entry in an allow-list allows every value for that list.
    """

    enabled: bool = True
    allow_origins: list[str] = Field(default_factory=list)
    allow_methods: list[str] = Field(default_factory=lambda: ["GET", "HEAD", "OPTIONS"])
    allow_headers: list[str] = Field(default_factory=lambda: ["Range"])
    expose_headers: list[str] = Field(
        default_factory=lambda: ["Content-Range", "Accept-Ranges"]
    )
    max_age: int = 0
    allow_credentials: bool = False


class ResourcesConfig(BaseModel):
    """The demonstration collection served under /resources."""

    units: str = "resources"
    count: int = Field(default=1000, ge=0)
    max_page_size: int = Field(default=100, ge=1)


class HttpExtConfig(BaseModel):
    """Top-level httpext configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    cors: CORSConfig = Field(default_factory=CORSConfig)
    resources: ResourcesConfig = Field(default_factory=ResourcesConfig)


def _parse_server(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the server section from YAML data into a dict for Pydantic.

    Handles nested structure: server.logging.level -> log_level, etc.
    """
    if data is None:
        return {}
    result: dict[str, Any] = {
        "host": data.get("host", "0.0.0.0"),
        "port": data.get("port", 8080),
        "shutdown_timeout": data.get("shutdown_timeout", 30),
    }
    logging_section = data.get("logging")
    if isinstance(logging_section, dict):
        result["log_level"] = logging_section.get("level", "INFO")
        result["log_format"] = logging_section.get("format", "text")
    return result


def _parse_cors(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the cors section from YAML data.

    Allow-lists may be written as a list or as a single string.
    """
    if data is None:
        return {}
    result: dict[str, Any] = {}
    for key in ("enabled", "max_age", "allow_credentials"):
        if key in data:
            result[key] = data[key]
    for key in ("allow_origins", "allow_methods", "allow_headers", "expose_headers"):
        if key in data:
            value = data[key]
            result[key] = [value] if isinstance(value, str) else list(value or [])
    return result


def _parse_resources(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the resources section from YAML data."""
    if data is None:
        return {}
    return {
        "units": data.get("units", "resources"),
        "count": data.get("count", 1000),
        "max_page_size": data.get("max_page_size", 100),
    }


def load_config(path: Path) -> HttpExtConfig:
    """Load an HttpExtConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated HttpExtConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return HttpExtConfig(
        server=ServerConfig(**_parse_server(raw.get("server"))),
        cors=CORSConfig(**_parse_cors(raw.get("cors"))),
        resources=ResourcesConfig(**_parse_resources(raw.get("resources"))),
    )
