from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass, replace
from typing import Any, Sequence

from dotenv import load_dotenv

from .domain_filter import normalize_domains

DEFAULT_SEARCH_URL = "https://lite.duckduckgo.com/lite/"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONFIG_FILE = "websearch.json"


class ConfigError(RuntimeError):
    """Raised when a configuration source holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    allowed_domains: tuple[str, ...] = ()
    log_level: str = "INFO"
    request_timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    search_url: str = DEFAULT_SEARCH_URL


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line flags; every flag is optional and overrides the file and environment."""
    p = argparse.ArgumentParser(
        prog="ftrack-websearch-mcp",
        description="WebSearch MCP Server - keyless web search over MCP stdio",
    )
    p.add_argument("--config", type=str, default=None, help=f"JSON settings file (default: ./{DEFAULT_CONFIG_FILE} if present)")
    p.add_argument(
        "--allowed-domain",
        dest="allowed_domains",
        action="append",
        default=None,
        help="Restrict results to this domain and its subdomains (repeatable)",
    )
    p.add_argument("--log-level", type=str, default=None, help="Logging level, e.g. DEBUG, INFO, WARNING")
    p.add_argument("--timeout", type=str, default=None, help="HTTP timeout in seconds")
    p.add_argument("--user-agent", type=str, default=None, help="User-Agent header sent to the search endpoint")
    p.add_argument("--search-url", type=str, default=None, help="Search endpoint URL (default: DuckDuckGo lite)")
    return p.parse_args(argv)


def _parse_timeout(value: Any, source: str) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: request timeout must be a number, got {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"{source}: request timeout must be positive, got {value!r}")
    return timeout


def _read_file(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _apply_file(settings: Settings, data: dict, path: str) -> Settings:
    changes: dict[str, Any] = {}
    if "allowed_domains" in data:
        domains = data["allowed_domains"]
        if not isinstance(domains, list) or not all(isinstance(d, str) for d in domains):
            raise ConfigError(f"{path}: allowed_domains must be a list of strings")
        changes["allowed_domains"] = normalize_domains(domains)
    if "log_level" in data:
        changes["log_level"] = str(data["log_level"])
    if "request_timeout" in data:
        changes["request_timeout"] = _parse_timeout(data["request_timeout"], path)
    if "user_agent" in data:
        changes["user_agent"] = str(data["user_agent"])
    if "search_url" in data:
        changes["search_url"] = str(data["search_url"])
    return replace(settings, **changes)


def _apply_env(settings: Settings) -> Settings:
    changes: dict[str, Any] = {}
    domains = os.getenv("ALLOWED_DOMAINS")
    if domains is not None:
        changes["allowed_domains"] = normalize_domains(domains.split(","))
    level = os.getenv("LOG_LEVEL")
    if level:
        changes["log_level"] = level
    timeout = os.getenv("REQUEST_TIMEOUT")
    if timeout:
        changes["request_timeout"] = _parse_timeout(timeout, "REQUEST_TIMEOUT")
    user_agent = os.getenv("USER_AGENT")
    if user_agent:
        changes["user_agent"] = user_agent
    search_url = os.getenv("SEARCH_URL")
    if search_url:
        changes["search_url"] = search_url
    return replace(settings, **changes)


def _apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    changes: dict[str, Any] = {}
    if args.allowed_domains is not None:
        changes["allowed_domains"] = normalize_domains(args.allowed_domains)
    if args.log_level:
        changes["log_level"] = args.log_level
    if args.timeout is not None:
        changes["request_timeout"] = _parse_timeout(args.timeout, "--timeout")
    if args.user_agent:
        changes["user_agent"] = args.user_agent
    if args.search_url:
        changes["search_url"] = args.search_url
    return replace(settings, **changes)


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    """Build settings from defaults, a JSON file, the environment and argv.

    Later sources win. A ``.env`` file in the working directory is loaded into
    the environment first and never overrides variables that are already set.
    """
    load_dotenv()
    args = parse_args(argv)
    settings = Settings()

    path = args.config or os.getenv("WEBSEARCH_CONFIG")
    if path:
        settings = _apply_file(settings, _read_file(path), path)
    elif os.path.isfile(DEFAULT_CONFIG_FILE):
        settings = _apply_file(settings, _read_file(DEFAULT_CONFIG_FILE), DEFAULT_CONFIG_FILE)

    settings = _apply_env(settings)
    return _apply_args(settings, args)
