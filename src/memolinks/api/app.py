"""FastAPI application for the memolinks local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..adapters.html_renderer import HtmlRenderer
from ..core.index import SCOPES
from ..core.model import Identity
from ..core.refs import MalformedReferenceError, parse_reference
from ..core.sections import bound_section, section_anchor
from ..locate import locate_reference


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with index, provider and renderer
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="memolinks API",
        description="Local JSON API for wiki-style reference resolution",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    security_scheme = HTTPBearer(auto_error=False)

    async def verify_token(
        credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
    ) -> None:
        """Verify bearer token when one is configured."""
        if token is None:
            return
        if credentials is None or credentials.credentials != token:
            raise HTTPException(status_code=401, detail="Invalid or missing token")

    def _identity(ref: str) -> tuple[Identity, str | None]:
        try:
            parsed = parse_reference(ref)
        except MalformedReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        res = runtime.index.lookup(parsed.identifier, "all")
        if res.identity is None:
            raise HTTPException(status_code=404, detail=f"Document {parsed.identifier} not found")
        return res.identity, parsed.section

    def _read(identity: Identity) -> str:
        text = runtime.provider.read(identity.path)
        if text is None:
            raise HTTPException(status_code=404, detail=f"Document {identity.relative} not found")
        return text

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "files": len(runtime.index.snapshot)}

    @app.get("/resolve")
    async def resolve(
        ref: str = Query(..., description="Reference identifier"),
        scope: str = Query("all", description="all | markdown | image"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Resolve an identifier; not_found and unknown_extension are regular outcomes."""
        if scope not in SCOPES:
            raise HTTPException(status_code=400, detail=f"Unknown scope {scope}")
        try:
            identifier = parse_reference(ref).identifier
        except MalformedReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        res = runtime.index.lookup(identifier, scope)
        out: dict[str, Any] = {"identifier": identifier, "status": res.kind}
        if res.identity is not None:
            out["path"] = str(res.identity.path)
            out["relative"] = res.identity.relative
            out["kind"] = res.identity.kind
        if res.extension:
            out["extension"] = res.extension
        return out

    @app.get("/section")
    async def section(
        ref: str = Query(..., description="Document reference"),
        name: str = Query(..., description="Section heading"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Line range and content of a section."""
        identity, _ = _identity(ref)
        text = _read(identity)
        bounds = bound_section(text, name)
        if bounds is None:
            raise HTTPException(status_code=404, detail=f"Section {name} not found")
        return {
            "path": str(identity.path),
            "start_line": bounds.start_line,
            "end_line": bounds.end_line,
            "text": bounds.extract(text),
        }

    @app.get("/anchor")
    async def anchor(
        ref: str = Query(..., description="Document reference"),
        name: str = Query(..., description="Section heading"),
        occurrence: int | None = Query(None, description="Which duplicate heading", ge=1),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Anchor id for a section heading."""
        identity, _ = _identity(ref)
        return {"anchor": section_anchor(_read(identity), name, occurrence)}

    @app.get("/render")
    async def render(
        ref: str = Query(..., description="Document reference"),
        format: str = Query("json", description="json | html"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Render a document with its references resolved and embeds expanded."""
        identity, _ = _identity(ref)
        try:
            doc = runtime.renderer.render_document(identity.path)
        except FileNotFoundError as e:
            raise HTTPException(status_code=404, detail=f"Document {identity.relative} not found") from e
        if format == "html":
            return {"path": str(identity.path), "html": HtmlRenderer().render(doc)}
        return {"path": str(identity.path), "parts": doc.to_dict()}

    @app.get("/fragment")
    async def fragment(
        raw: str = Query(..., description="Reference token, e.g. ![[note#Section]]"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Render a single reference to a fragment."""
        try:
            return runtime.renderer.render_reference(raw).to_dict()
        except MalformedReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    @app.get("/locate")
    async def locate(
        ref: str = Query(..., description="Reference, optionally with #section"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Existing or default path for a reference, plus section lines."""
        try:
            return locate_reference(ref, runtime)
        except MalformedReferenceError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
