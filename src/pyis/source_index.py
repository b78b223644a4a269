"""Line-indexed view of a test module's assertion calls and comments.

Each source file is read and parsed at most once per process. The result maps
line numbers to the assertion call recorded there (with the literal source
text of its arguments) and to the comment found on that line. A file that
cannot be read or parsed is cached as unavailable and never retried.
"""

from __future__ import annotations

import ast
import io
import logging
import os
import threading
import tokenize
from typing import Dict, Iterable, List, Optional, Tuple

from .types import ArgSource, CallSite, SourceIndex

log = logging.getLogger(__name__)

# Local names the harness is conventionally bound to in test code.
BINDING_NAMES: Tuple[str, ...] = ("is_", "is_relaxed")

# Assertion kinds whose single argument is a boolean expression.
BOOLEAN_KINDS = frozenset({"true"})

_CACHE: Dict[str, SourceIndex] = {}
_CACHE_LOCK = threading.Lock()


def source_text(source: str, node: ast.AST) -> str:
    """Literal source of *node*; single-line normalized form if it spans lines."""
    segment = ast.get_source_segment(source, node)
    if segment is None or "\n" in segment:
        return ast.unparse(node)
    return segment.strip()


def is_literal(node: ast.AST) -> bool:
    if isinstance(node, ast.Constant):
        return True
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        return isinstance(node.operand, ast.Constant)
    return False


def _bound_names(target: ast.AST) -> Iterable[str]:
    match target:
        case ast.Name(id=name):
            yield name
        case ast.Tuple(elts=elts) | ast.List(elts=elts):
            for elt in elts:
                yield from _bound_names(elt)
        case ast.Starred(value=value):
            yield from _bound_names(value)


class _CallCollector(ast.NodeVisitor):
    """Collects harness calls by line, tracking assignments per scope."""

    def __init__(self, source: str, names: Iterable[str]):
        self.source = source
        self.names = frozenset(names)
        self.starts: Dict[int, CallSite] = {}
        self.continuations: Dict[int, CallSite] = {}
        self._scopes: List[Dict[str, str]] = [{}]

    def calls(self) -> Dict[int, CallSite]:
        merged = dict(self.continuations)
        merged.update(self.starts)
        return merged

    # ---- scopes ----

    def _visit_scope(self, node: ast.AST) -> None:
        self._scopes.append({})
        self.generic_visit(node)
        self._scopes.pop()

    visit_FunctionDef = _visit_scope
    visit_AsyncFunctionDef = _visit_scope
    visit_Lambda = _visit_scope
    visit_ClassDef = _visit_scope

    # ---- assignments ----

    def _bind(self, targets: Iterable[ast.AST], stmt: ast.AST) -> None:
        text = source_text(self.source, stmt)
        scope = self._scopes[-1]

        for target in targets:
            for name in _bound_names(target):
                scope[name] = text

    def visit_Assign(self, node: ast.Assign) -> None:
        self.generic_visit(node)
        self._bind(node.targets, node)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        self.generic_visit(node)
        if node.value is not None:
            self._bind([node.target], node)

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self.generic_visit(node)
        self._bind([node.target], node)

    # ---- calls ----

    def _method(self, node: ast.Call) -> Optional[str]:
        func = node.func
        if not isinstance(func, ast.Attribute):
            return None
        if not isinstance(func.value, ast.Name) or func.value.id not in self.names:
            return None
        return func.attr

    def visit_Call(self, node: ast.Call) -> None:
        method = self._method(node)
        if method is None:
            self.generic_visit(node)
            return

        arg_nodes: List[ast.AST] = list(node.args)
        arg_nodes.extend(kw.value for kw in node.keywords)
        args = [ArgSource(source_text(self.source, arg), is_literal(arg)) for arg in arg_nodes]

        binding = None
        if arg_nodes and isinstance(arg_nodes[0], ast.Name):
            binding = self._scopes[-1].get(arg_nodes[0].id)

        site = CallSite(line=node.lineno, method=method, args=args, binding=binding)
        self.starts.setdefault(node.lineno, site)

        end = node.end_lineno or node.lineno
        for line in range(node.lineno + 1, end + 1):
            self.continuations.setdefault(line, site)


def _read_comments(source: str) -> Dict[int, str]:
    comments: Dict[int, str] = {}

    for tok in tokenize.generate_tokens(io.StringIO(source).readline):
        if tok.type != tokenize.COMMENT:
            continue
        text = tok.string.lstrip("#").strip()
        if text:
            comments[tok.start[0]] = text

    return comments


def build_index(path: str, names: Iterable[str] = BINDING_NAMES) -> SourceIndex:
    """Parse *path* into a SourceIndex; unreadable files give an empty one."""
    try:
        with tokenize.open(path) as handle:
            source = handle.read()
        tree = ast.parse(source, filename=path)
        comments = _read_comments(source)
        collector = _CallCollector(source, names)
        collector.visit(tree)
    except (OSError, SyntaxError, ValueError, RecursionError, tokenize.TokenError) as exc:
        log.debug("event=source_index_unavailable path=%s error=%s", path, exc)
        return SourceIndex(path, ok=False)

    return SourceIndex(path, calls=collector.calls(), comments=comments)


def load_index(path: str) -> SourceIndex:
    """Return the cached index for *path*, building it on first use."""
    key = os.path.abspath(path)
    index = _CACHE.get(key)
    if index is not None:
        return index

    with _CACHE_LOCK:
        index = _CACHE.get(key)
        if index is None:
            index = build_index(key)
            _CACHE[key] = index

    return index


def clear_cache() -> None:
    with _CACHE_LOCK:
        _CACHE.clear()


def resolve_call(path: str, line: int) -> Optional[CallSite]:
    return load_index(path).calls.get(line)


def format_call_args(site: CallSite) -> str:
    # only boolean kinds carry an expression worth echoing back
    if site.method in BOOLEAN_KINDS and len(site.args) == 1:
        return site.args[0].text
    return ""


def load_arguments(path: str, line: int) -> Tuple[str, bool]:
    """Argument source of the assertion call on *line* of *path*."""
    site = resolve_call(path, line)
    if site is None:
        return "", False

    text = format_call_args(site)
    if not text:
        return "", False

    return text, True


def load_comment(path: str, line: int) -> Tuple[str, bool]:
    """Comment text on *line* of *path*, without the leading ``#``."""
    comment = load_index(path).comments.get(line)
    if comment is None:
        return "", False
    return comment, True
