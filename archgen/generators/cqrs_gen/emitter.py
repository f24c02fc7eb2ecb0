"""
Structural description of a C# source file and the single emitter that turns it
into text.

Renderers never concatenate whole files. They fill a SourceFile (usings,
namespace, type declarations) whose members are CodeBlocks, and `emit` owns all
layout decisions: using order, blank lines, brace placement and indentation.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

INDENT = "    "


class CodeBlock:
    """Lines of code with relative indentation, built with `line` and `braces`."""

    def __init__(self) -> None:
        self.lines: List[str] = []
        self._level = 0

    def line(self, text: str = "") -> "CodeBlock":
        self.lines.append(f"{INDENT * self._level}{text}" if text else "")
        return self

    def extend(self, lines: List[str]) -> "CodeBlock":
        for text in lines:
            self.line(text)
        return self

    @contextmanager
    def indent(self) -> Iterator["CodeBlock"]:
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1

    @contextmanager
    def braces(self, header: str, close: str = "}") -> Iterator["CodeBlock"]:
        self.line(header)
        self.line("{")
        with self.indent():
            yield self
        self.line(close)

    def __bool__(self) -> bool:
        return bool(self.lines)


@dataclass
class TypeDeclaration:
    """A class, record or interface. Members are separated by one blank line."""
    signature: str
    attributes: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    members: List[CodeBlock] = field(default_factory=list)
    # Positional records such as `record X(int Id) : IRequest<bool>;` have no body.
    bodyless: bool = False

    def member(self) -> CodeBlock:
        block = CodeBlock()
        self.members.append(block)
        return block


@dataclass
class SourceFile:
    namespace: str
    usings: List[str] = field(default_factory=list)
    types: List[TypeDeclaration] = field(default_factory=list)

    def use(self, *namespaces: str) -> "SourceFile":
        for ns in namespaces:
            if ns and ns not in self.usings and ns != self.namespace:
                self.usings.append(ns)
        return self

    def declare(self, signature: str, **kwargs) -> TypeDeclaration:
        decl = TypeDeclaration(signature=signature, **kwargs)
        self.types.append(decl)
        return decl


def _emit_type(decl: TypeDeclaration) -> List[str]:
    out: List[str] = []
    if decl.summary:
        out.extend(["/// <summary>", f"/// {decl.summary}", "/// </summary>"])
    out.extend(f"[{attr}]" for attr in decl.attributes)
    if decl.bodyless:
        out.append(f"{decl.signature};")
        return out
    out.append(decl.signature)
    out.append("{")
    members = [m for m in decl.members if m]
    for i, member in enumerate(members):
        if i:
            out.append("")
        out.extend(f"{INDENT}{text}" if text else "" for text in member.lines)
    out.append("}")
    return out


def emit(source: SourceFile) -> str:
    """Render a SourceFile as C# text with a file-scoped namespace."""
    out: List[str] = [f"using {ns};" for ns in source.usings]
    if out:
        out.append("")
    out.append(f"namespace {source.namespace};")
    for decl in source.types:
        out.append("")
        out.extend(_emit_type(decl))
    return "\n".join(out) + "\n"
