"""Locate the file (and section lines) a reference points to, or where it should be created."""

import json
import posixpath
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import LinksConfig
from .core.exts import extension_of, kind_of
from .core.index import normalize_ref
from .core.refs import parse_reference, unwrap_token
from .core.sections import bound_section, section_anchor


def resolve_short_ref_folder(
    ref: str, links: LinksConfig, now: datetime | None = None
) -> str | None:
    """
    Folder a new document for *ref* should be created in.

    Only short refs (no folder part) get one: the first rule whose regex
    matches the name wins, its folder expanded with strftime; otherwise the
    configured short ref folder, if any.
    """
    if "/" in ref:
        return None
    name = posixpath.splitext(ref)[0] if extension_of(ref) else ref
    for rule in links.rules:
        if rule.rule.search(name):
            return (now or datetime.now()).strftime(rule.folder)
    return links.short_ref_folder or None


def creation_target(
    identifier: str,
    roots: list[Path],
    links: LinksConfig,
    now: datetime | None = None,
) -> Path:
    """Default path for a document that does not exist yet."""
    ref = normalize_ref(identifier)
    if kind_of(ref, links.markdown_exts) == "unknown":
        ref = f"{ref}{links.markdown_exts[0]}"
    folder = resolve_short_ref_folder(ref, links, now)
    base = roots[0] / folder if folder else roots[0]
    return base / ref


def locate_reference(raw: str, rt: Any) -> dict[str, Any]:
    """
    Get location information for a reference.

    Args:
        raw: Reference text, with or without brackets
        rt: Runtime instance

    Returns:
        Dict with the resolution status, the existing or default path and,
        for sections, 1-based line numbers and the anchor id

    Raises:
        MalformedReferenceError: if the reference has no identifier
    """
    inner, _embed = unwrap_token(raw)
    ref = parse_reference(inner)
    res = rt.index.lookup(ref.identifier, "all")

    result: dict[str, Any] = {
        "identifier": ref.identifier,
        "status": res.kind,
        "exists": res.found,
    }

    if res.identity is None:
        target = creation_target(ref.identifier, rt.config.workspace.roots, rt.config.links)
        result["path"] = str(target.absolute())
        if res.extension:
            result["extension"] = res.extension
        return result

    result["path"] = str(res.identity.path)
    if ref.section and res.identity.kind == "markdown":
        result["section"] = ref.section
        text = rt.provider.read(res.identity.path)
        bounds = bound_section(text, ref.section) if text is not None else None
        if bounds is not None:
            result["lines"] = {"start": bounds.start_line + 1, "end": bounds.end_line}
            result["anchor"] = section_anchor(text, ref.section)
    return result


def create_document(path: Path, rt: Any) -> bool:
    """Create an empty document at *path* unless it exists; index it either way."""
    created = False
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
        created = True
    rt.index.add(path)
    return created


def cmd_locate(args: Any, rt: Any) -> int:
    """
    Locate command handler.

    Args:
        args: Parsed command-line arguments
        rt: Runtime instance

    Returns:
        Exit code
    """
    location = locate_reference(args.ref, rt)

    if not location["exists"]:
        if getattr(args, "create", False):
            created = create_document(Path(location["path"]), rt)
            location["exists"] = True
            location["created"] = created
        elif location["status"] == "unknown_extension" and not args.quiet:
            print(
                f"Unknown extension {location['extension']} in {location['identifier']}",
                file=sys.stderr,
            )

    if getattr(args, "format", "json") == "tsv":
        lines = location.get("lines", {})
        print(
            f"{location['identifier']}\t{location['status']}\t{location['path']}\t"
            f"{lines.get('start', '')}\t{lines.get('end', '')}"
        )
    else:
        print(json.dumps(location, indent=2))

    return 0 if location["exists"] else 2
