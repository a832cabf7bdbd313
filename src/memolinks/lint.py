from dataclasses import dataclass
from typing import Protocol

from .core.index import WorkspaceIndex
from .core.model import ReferenceMatch
from .core.ports import DocumentProvider
from .core.refs import MalformedReferenceError, find_references, parse_reference
from .core.sections import bound_section


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    match: ReferenceMatch | None = None

    @property
    def line(self) -> int | None:
        return self.match.line + 1 if self.match else None


class LintRule(Protocol):
    id: str

    def check(
        self, text: str, index: WorkspaceIndex, provider: DocumentProvider
    ) -> list[Finding]:
        pass


class DeadLinksRule:
    id = "dead-links"

    def check(
        self, text: str, index: WorkspaceIndex, provider: DocumentProvider
    ) -> list[Finding]:
        out: list[Finding] = []
        for match in find_references(text):
            try:
                ref = parse_reference(match.raw)
            except MalformedReferenceError as e:
                out.append(Finding("error", str(e), match))
                continue
            scope = index.scope_for(ref.identifier) if match.embed else "all"
            res = index.lookup(ref.identifier, scope)
            if res.kind == "unknown_extension":
                out.append(
                    Finding("warn", f"Unknown extension {res.extension} in {ref.identifier}", match)
                )
            elif not res.found:
                out.append(Finding("error", f"Unknown document {ref.identifier}", match))
        return out


class MissingSectionRule:
    id = "missing-section"

    def check(
        self, text: str, index: WorkspaceIndex, provider: DocumentProvider
    ) -> list[Finding]:
        out: list[Finding] = []
        for match in find_references(text):
            try:
                ref = parse_reference(match.raw)
            except MalformedReferenceError:
                continue
            if not ref.section:
                continue
            res = index.lookup(ref.identifier, "all")
            if res.identity is None or res.identity.kind != "markdown":
                continue
            target = provider.read(res.identity.path)
            if target is None or bound_section(target, ref.section) is None:
                out.append(
                    Finding("warn", f"Unknown section {ref.section!r} in {ref.identifier}", match)
                )
        return out


DEFAULT_RULES: list[LintRule] = [DeadLinksRule(), MissingSectionRule()]


def lint_text(
    text: str,
    index: WorkspaceIndex,
    provider: DocumentProvider,
    rules: list[LintRule] | None = None,
) -> list[Finding]:
    findings: list[Finding] = []
    for rule in rules if rules is not None else DEFAULT_RULES:
        findings.extend(rule.check(text, index, provider))
    findings.sort(key=lambda f: (f.match.start if f.match else -1))
    return findings
