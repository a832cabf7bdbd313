"""CLI for memolinks - wiki-style references across a markdown workspace."""

import argparse
import json
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.html_renderer import HtmlRenderer
from .adapters.md_renderer import MarkdownRenderer
from .core.index import SCOPES
from .core.refs import parse_reference, unwrap_token
from .core.sections import bound_section, section_anchor
from .export.site import FORMATS, SiteExporter
from .lint import Finding, lint_text
from .locate import cmd_locate
from .runtime import build_runtime

logger = logging.getLogger(__name__)


def _version_text() -> str:
    commit = os.environ.get("MEMOLINKS_COMMIT", "unknown")
    return (
        f"memolinks {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}\n"
        f"commit {commit}"
    )


def _document(ref: str, rt: Any) -> Any:
    """Resolve *ref* to a document identity, or None with a message on stderr."""
    inner, _ = unwrap_token(ref)
    identifier = parse_reference(inner).identifier
    res = rt.index.lookup(identifier, "all")
    if res.identity is None:
        print(f"Document {identifier} not found ({res.kind})", file=sys.stderr)
    return res.identity


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List indexed files in resolution order."""
    snapshot = rt.index.snapshot.scope(args.scope)
    if args.json:
        output = [
            {"path": str(i.path), "relative": i.relative, "kind": i.kind} for i in snapshot
        ]
        print(json.dumps(output, indent=2))
    else:
        for identity in snapshot:
            print(identity.relative)
    return 0


def cmd_resolve(args: argparse.Namespace, rt: Any) -> int:
    """Resolve an identifier to a workspace file."""
    inner, embed = unwrap_token(args.ref)
    identifier = parse_reference(inner).identifier
    scope = args.scope or (rt.index.scope_for(identifier) if embed else "all")
    res = rt.index.lookup(identifier, scope)

    if args.json:
        output: dict[str, Any] = {"identifier": identifier, "status": res.kind}
        if res.identity is not None:
            output["path"] = str(res.identity.path)
            output["kind"] = res.identity.kind
        if res.extension:
            output["extension"] = res.extension
        print(json.dumps(output, indent=2))
    elif res.identity is not None:
        print(res.identity.path)
    elif res.kind == "unknown_extension":
        print(f"Unknown extension {res.extension} in {identifier}", file=sys.stderr)
    elif not args.quiet:
        print(f"Document {identifier} not found", file=sys.stderr)

    return 0 if res.found else 2


def cmd_section(args: argparse.Namespace, rt: Any) -> int:
    """Print the content of a section."""
    identity = _document(args.ref, rt)
    if identity is None:
        return 2
    text = rt.provider.read(identity.path)
    bounds = bound_section(text, args.name) if text is not None else None
    if bounds is None:
        print(f"Section {args.name!r} not found in {identity.relative}", file=sys.stderr)
        return 2

    if args.json:
        output = {
            "path": str(identity.path),
            "start_line": bounds.start_line,
            "end_line": bounds.end_line,
            "text": bounds.extract(text),
        }
        print(json.dumps(output, indent=2))
    else:
        print(bounds.extract(text))
    return 0


def cmd_anchor(args: argparse.Namespace, rt: Any) -> int:
    """Print the anchor id of a section heading."""
    identity = _document(args.ref, rt)
    if identity is None:
        return 2
    text = rt.provider.read(identity.path)
    if text is None:
        print(f"Cannot read {identity.path}", file=sys.stderr)
        return 1
    print(section_anchor(text, args.name, args.occurrence))
    return 0


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Render a document with references resolved and embeds expanded."""
    identity = _document(args.ref, rt)
    if identity is None:
        return 2
    doc = rt.renderer.render_document(identity.path)

    if args.format == "json":
        print(json.dumps(doc.to_dict(), indent=2))
    elif args.format == "html":
        print(HtmlRenderer().render(doc))
    else:
        print(MarkdownRenderer().render(doc), end="")
    return 0


def cmd_lint(args: argparse.Namespace, rt: Any) -> int:
    """Check every markdown document for dead references and missing sections."""
    all_findings: list[tuple[str, Finding]] = []
    for identity in rt.index.snapshot.markdown:
        text = rt.provider.read(identity.path)
        if text is None:
            all_findings.append((identity.relative, Finding("error", "Cannot read file")))
            continue
        for f in lint_text(text, rt.index, rt.provider):
            all_findings.append((identity.relative, f))

    if args.json:
        output = [
            {
                "path": rel,
                "severity": f.severity,
                "message": f.message,
                "line": f.line,
                "raw": f.match.raw if f.match else None,
            }
            for rel, f in all_findings
        ]
        print(json.dumps(output, indent=2))
    elif not args.quiet:
        for rel, f in all_findings:
            where = f"{rel}:{f.line}" if f.line else rel
            print(f"{where}: [{f.severity}] {f.message}")

    return 1 if any(f.severity == "error" for _, f in all_findings) else 0


def cmd_export(args: argparse.Namespace, rt: Any) -> int:
    """Export the rendered workspace with graph.json."""
    exporter = SiteExporter(rt, Path(args.outdir), fmt=args.format, copy_assets=not args.no_assets)
    counts = exporter.export_all()

    if args.json:
        print(json.dumps(counts, indent=2))
    elif not args.quiet:
        print(f"Exported {counts['documents']} documents and {counts['assets']} assets to {args.outdir}")
        if counts["failed"] > 0:
            print(f"Failed: {counts['failed']}")
    return 1 if counts["failed"] else 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install memolinks[api]",
            file=sys.stderr,
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = args.token
    if token_arg == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    host = args.host or rt.config.api.host
    port = args.port or rt.config.api.port
    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="memo", description="memolinks CLI")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/memo.toml, root/memo.toml)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Workspace root (overrides config)",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimize output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    parser.add_argument("--version", action="version", version=_version_text())

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ls command
    parser_ls = subparsers.add_parser("ls", help="List indexed files")
    parser_ls.add_argument("--scope", choices=SCOPES, default="all")

    # resolve command
    parser_resolve = subparsers.add_parser("resolve", help="Resolve a reference to a file")
    parser_resolve.add_argument("ref", help="Identifier or [[reference]]")
    parser_resolve.add_argument(
        "--scope", choices=SCOPES, default=None, help="Lookup scope (default: from reference)"
    )

    # section command
    parser_section = subparsers.add_parser("section", help="Print a section of a document")
    parser_section.add_argument("ref", help="Document reference")
    parser_section.add_argument("name", help="Section heading")

    # anchor command
    parser_anchor = subparsers.add_parser("anchor", help="Print the anchor id of a heading")
    parser_anchor.add_argument("ref", help="Document reference")
    parser_anchor.add_argument("name", help="Section heading")
    parser_anchor.add_argument(
        "--occurrence",
        type=int,
        default=None,
        help="Which duplicate heading (default: the second when a title repeats)",
    )

    # render command
    parser_render = subparsers.add_parser("render", help="Render a document with embeds")
    parser_render.add_argument("ref", help="Document reference")
    parser_render.add_argument("--format", choices=("md", "html", "json"), default="md")

    # locate command
    parser_locate = subparsers.add_parser(
        "locate", help="Print the path and section lines a reference points to"
    )
    parser_locate.add_argument("ref", help="Reference, optionally with #section")
    parser_locate.add_argument(
        "--create", action="store_true", help="Create the document when missing"
    )
    parser_locate.add_argument("--format", choices=("json", "tsv"), default="json")

    # lint command
    subparsers.add_parser("lint", help="Check references in all documents")

    # export command
    parser_export = subparsers.add_parser("export", help="Export rendered workspace")
    parser_export.add_argument("outdir", help="Output directory")
    parser_export.add_argument("--format", choices=FORMATS, default="md")
    parser_export.add_argument(
        "--no-assets", action="store_true", help="Do not copy images and other files"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default=None, help="Host to bind (default: from config)")
    parser_serve.add_argument("--port", type=int, default=None, help="Port (default: from config)")
    parser_serve.add_argument(
        "--token",
        default="auto",
        help="Bearer token: 'auto' to generate, 'none' to disable, or a value",
    )
    parser_serve.add_argument("--cors", action="store_true", help="Enable CORS")

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.ERROR if args.quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        rt = build_runtime(root=args.root, config_path=args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Dispatch to command handlers
    handlers = {
        "ls": cmd_ls,
        "resolve": cmd_resolve,
        "section": cmd_section,
        "anchor": cmd_anchor,
        "render": cmd_render,
        "locate": cmd_locate,
        "lint": cmd_lint,
        "export": cmd_export,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            logger.debug("Command %s failed", args.cmd, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
