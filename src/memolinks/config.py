"""Configuration loader for memo.toml."""

import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .adapters.fs_scanner import DEFAULT_EXCLUDE
from .core.exts import MARKDOWN_EXTS

CONFIG_FILE = "memo.toml"


@dataclass
class WorkspaceConfig:
    """Workspace roots and scan settings."""
    roots: list[Path]
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    case_sensitive: bool | None = None  # None: detect from platform


@dataclass
class FolderRule:
    """Where new notes go when their short ref matches `rule`."""
    rule: re.Pattern[str]
    folder: str


@dataclass
class LinksConfig:
    """Reference resolution and note creation settings."""
    markdown_exts: tuple[str, ...] = MARKDOWN_EXTS
    short_ref_folder: str = ""
    rules: list[FolderRule] = field(default_factory=list)


@dataclass
class RenderConfig:
    """Embed rendering settings."""
    max_depth: int = 10
    strip_frontmatter: bool = True


@dataclass
class ApiConfig:
    """Local JSON API settings."""
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class MemoConfig:
    """Complete memolinks configuration."""
    workspace: WorkspaceConfig
    links: LinksConfig
    render: RenderConfig
    api: ApiConfig


def _parse_rules(raw_rules: list[dict[str, Any]]) -> list[FolderRule]:
    rules = []
    for i, item in enumerate(raw_rules):
        try:
            pattern = re.compile(item["rule"])
        except KeyError:
            raise ValueError(f"links.rules[{i}] is missing 'rule'") from None
        except re.error as e:
            raise ValueError(f"links.rules[{i}] has an invalid regex: {e}") from e
        rules.append(FolderRule(rule=pattern, folder=str(item.get("folder", ""))))
    return rules


def load_config(config_path: Path | None = None, root: Path | None = None) -> MemoConfig:
    """
    Load configuration from memo.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/memo.toml
    3. root/memo.toml

    Relative workspace roots are resolved against the directory of the
    config file that defined them.

    Args:
        config_path: Explicit path to config file
        root: Workspace root; overrides `workspace.roots` when given

    Returns:
        MemoConfig with resolved settings

    Raises:
        ValueError: if a folder rule is not a valid regex
    """
    toml_data: dict[str, Any] = {}
    base = Path.cwd()

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILE)
    if root:
        search_paths.append(root / CONFIG_FILE)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            base = path.parent
            break

    # Parse workspace config
    ws_data = toml_data.get("workspace", {})
    if root is not None:
        roots = [Path(root)]
    else:
        roots = [base / r for r in ws_data.get("roots", ["."])]
    workspace = WorkspaceConfig(
        roots=roots,
        exclude=list(ws_data.get("exclude", DEFAULT_EXCLUDE)),
        case_sensitive=ws_data.get("case_sensitive"),
    )

    # Parse links config
    links_data = toml_data.get("links", {})
    exts = links_data.get("markdown_exts", list(MARKDOWN_EXTS))
    links = LinksConfig(
        markdown_exts=tuple((e if e.startswith(".") else f".{e}").lower() for e in exts),
        short_ref_folder=links_data.get("short_ref_folder", ""),
        rules=_parse_rules(links_data.get("rules", [])),
    )

    # Parse render config
    render_data = toml_data.get("render", {})
    render = RenderConfig(
        max_depth=int(render_data.get("max_depth", 10)),
        strip_frontmatter=bool(render_data.get("strip_frontmatter", True)),
    )

    # Parse API config
    api_data = toml_data.get("api", {})
    api = ApiConfig(
        host=api_data.get("host", "127.0.0.1"),
        port=int(api_data.get("port", 8765)),
    )

    return MemoConfig(workspace=workspace, links=links, render=render, api=api)
