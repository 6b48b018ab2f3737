"""Interface text → map importer.

The text is parsed with the LALR grammar in lark/interface.lark.  Code
around the interfaces (imports, functions, classes) is lexed as loose
tokens and thrown away, so a whole .ts file can be passed in.  Braces
outside strings and comments must balance; a regex literal holding a
lone brace (`/[{]/`) cannot be told apart from division and breaks the
parse.

Two passes:

    1. collect   every `interface Name {...}`, merging repeated names
    2. resolve   lazily, on first reference, memoized per name

Only structure survives.  Optionality, readonly-ness, generics and
literal values are dropped; what is left is the type family of each
property.
"""

from __future__ import annotations

import ast
import asyncio
import logging
import threading
from typing import Any, Dict, List, NamedTuple, Optional, Set, Tuple

import lark
from lark import Token, Transformer
from lark.exceptions import UnexpectedInput

from ._constants import INTERFACE_ARRAY_GENERICS, INTERFACE_KEYWORDS
from ._errors import ImporterParseError
from ._shape import (
    ARRAY,
    BOOLEAN,
    NUMBER,
    OBJECT,
    STRING,
    ArrayShape,
    ObjectShape,
    Shape,
    as_shape,
)

logger = logging.getLogger(__name__)


# ── Parse results ─────────────────────────────────────────────
# The transformer only records what it saw.  Names are looked up later,
# once every interface in the text is known.

class _Name(str):
    """A property name (distinct from the Token str subclass)."""


class _Ref(NamedTuple):
    name: str
    args: Tuple[Any, ...] = ()


class _ArrayOf(NamedTuple):
    element: Any


class _Union(NamedTuple):
    alternatives: Tuple[Any, ...]


class _Members(NamedTuple):
    fields: Tuple[Tuple[str, Any], ...]
    indexed: bool


class _Interface(NamedTuple):
    name: str
    bases: Tuple[_Ref, ...]
    body: _Members


_INDEX = object()
_NULLISH = frozenset(("null", "undefined"))
_BOOLEAN_LITERALS = frozenset(("true", "false"))


class _InterfaceTransformer(Transformer):
    """Builds _Interface records bottom-up; every method is stateless."""

    # ── Declarations ──

    def start(self, children):
        return _collect(children)

    def block(self, children):
        return _collect(children)

    def interface_decl(self, children):
        name = str(children[0])
        bases: Tuple[_Ref, ...] = ()
        body = _Members((), False)
        for child in children[1:]:
            if isinstance(child, tuple) and not isinstance(child, _Members):
                bases = child
            elif isinstance(child, _Members):
                body = child
        return _Interface(name, bases, body)

    def heritage(self, children):
        return tuple(children)

    def type_params(self, children):
        return None

    def type_param(self, children):
        return None

    # ── Members ──

    def object_type(self, children):
        fields = []
        indexed = False
        for member in children:
            if member is _INDEX:
                indexed = True
            elif isinstance(member, tuple):
                fields.append(member)
        return _Members(tuple(fields), indexed)

    def property(self, children):
        name = next(c for c in children if isinstance(c, _Name))
        annotation = [c for c in children if not isinstance(c, str)]
        return (str(name), annotation[-1] if annotation else OBJECT)

    def method(self, children):
        return None

    def call_signature(self, children):
        return None

    def index_signature(self, children):
        return _INDEX

    def property_name(self, children):
        tok = children[0]
        if tok.type == "STRING":
            return _Name(_unquote(tok))
        return _Name(tok)

    def params(self, children):
        return None

    def param(self, children):
        return None

    # ── Types ──

    def union_type(self, children):
        return _Union(tuple(children))

    def intersection_type(self, children):
        return OBJECT

    def opaque_type(self, children):
        return OBJECT

    def readonly_type(self, children):
        return children[-1]

    def array_type(self, children):
        return _ArrayOf(children[0])

    def tuple_type(self, children):
        return ARRAY

    def tuple_member(self, children):
        return None

    def function_type(self, children):
        return OBJECT

    def string_literal(self, children):
        return STRING

    def number_literal(self, children):
        return NUMBER

    def type_ref(self, children):
        args = children[1] if len(children) > 1 else ()
        return _Ref(children[0], args)

    def qualified_name(self, children):
        return ".".join(str(t) for t in children)

    def type_args(self, children):
        return tuple(children)


def _collect(children: List[Any]) -> List[_Interface]:
    found: List[_Interface] = []
    for child in children:
        if isinstance(child, _Interface):
            found.append(child)
        elif isinstance(child, list):
            found.extend(child)
    return found


def _unquote(tok: Token) -> str:
    try:
        return ast.literal_eval(str(tok))
    except (ValueError, SyntaxError):
        return str(tok)[1:-1]


# ── Parser instance ───────────────────────────────────────────

_parser: Optional[lark.Lark] = None
_parser_lock = threading.Lock()


def _get_parser() -> lark.Lark:
    """Build the shared parser on first use."""
    global _parser
    with _parser_lock:
        if _parser is None:
            _parser = lark.Lark.open(
                "lark/interface.lark", rel_to=__file__, parser="lalr",
                transformer=_InterfaceTransformer(),
            )
            logger.debug("interface grammar compiled")
        return _parser


def _parse(text: str) -> List[_Interface]:
    try:
        return _get_parser().parse(text)
    except UnexpectedInput as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        if line is not None and line < 0:
            line = column = None
        raise ImporterParseError(
            "cannot parse interface text at line {}, column {}".format(line, column),
            line=line, column=column) from e


# ── Resolution ────────────────────────────────────────────────

class _Resolver:
    """Turns collected declarations into shapes, one interface at a time."""

    def __init__(self, interfaces: List[_Interface]) -> None:
        self.declarations: Dict[str, List[_Interface]] = {}
        for decl in interfaces:
            self.declarations.setdefault(decl.name, []).append(decl)
        self._memo: Dict[str, Shape] = {}
        self._visiting: Set[str] = set()

    def interface(self, name: str) -> Shape:
        """Shape of a declared interface: ObjectShape, or OBJECT if indexed."""
        if name in self._memo:
            return self._memo[name]
        if name in self._visiting:
            raise ImporterParseError(
                'circular reference through interface "{}"'.format(name))
        self._visiting.add(name)
        try:
            shape = self._build(self.declarations[name])
        finally:
            self._visiting.discard(name)
        self._memo[name] = shape
        logger.debug("resolved interface %s", name)
        return shape

    def _build(self, decls: List[_Interface]) -> Shape:
        fields: Dict[str, Shape] = {}
        for decl in decls:
            for base in decl.bases:
                target = self._lookup(base.name)
                if target is None:
                    continue
                inherited = self.interface(target)
                if isinstance(inherited, ObjectShape):
                    fields.update(inherited.fields)
        for decl in decls:
            if decl.body.indexed:
                return OBJECT
            for key, node in decl.body.fields:
                fields[key] = self.type(node)
        return ObjectShape(fields)

    def type(self, node: Any) -> Shape:
        if isinstance(node, Shape):
            return node
        if isinstance(node, _ArrayOf):
            return ArrayShape(self.type(node.element))
        if isinstance(node, _Union):
            for alt in node.alternatives:
                if isinstance(alt, _Ref) and alt.name in _NULLISH:
                    continue
                return self.type(alt)
            return OBJECT
        if isinstance(node, _Members):
            if node.indexed:
                return OBJECT
            return ObjectShape({key: self.type(sub) for key, sub in node.fields})
        if isinstance(node, _Ref):
            return self._reference(node)
        return OBJECT

    def _reference(self, ref: _Ref) -> Shape:
        if ref.name in INTERFACE_KEYWORDS:
            return as_shape(INTERFACE_KEYWORDS[ref.name])
        if ref.name in _BOOLEAN_LITERALS:
            return BOOLEAN
        if ref.name in INTERFACE_ARRAY_GENERICS:
            if ref.args:
                return ArrayShape(self.type(ref.args[0]))
            return ARRAY
        target = self._lookup(ref.name)
        if target is None:
            return OBJECT
        shape = self.interface(target)
        # An interface with nothing to check says no more than `object`.
        if isinstance(shape, ObjectShape) and len(shape) == 0:
            return OBJECT
        return shape

    def _lookup(self, name: str) -> Optional[str]:
        if name in self.declarations:
            return name
        # `Models.User` finds `User` declared inside a namespace block.
        short = name.rsplit(".", 1)[-1]
        if short in self.declarations:
            return short
        return None


# ── Public entry points ───────────────────────────────────────

def parse_interface_text(text: Any, interface_name: Optional[str] = None) -> Shape:
    """Convert interface declarations into a map (synchronous).

    With `interface_name`, that interface is returned.  Otherwise a lone
    interface is returned as is, and several come back as an ObjectShape
    keyed by interface name.
    """
    if not isinstance(text, str):
        raise ImporterParseError("interface text must be a string")

    resolver = _Resolver(_parse(text))
    names = list(resolver.declarations)
    logger.debug("collected %d interface(s): %s", len(names), ", ".join(names))

    if not names:
        raise ImporterParseError("No interfaces found in the provided text")

    if interface_name:
        if interface_name not in resolver.declarations:
            raise ImporterParseError(
                'Interface "{}" not found. Available interfaces: {}'.format(
                    interface_name, ", ".join(names)))
        return resolver.interface(interface_name)

    if len(names) == 1:
        return resolver.interface(names[0])
    return ObjectShape({name: resolver.interface(name) for name in names})


async def parse_interface_text_to_map(text: Any,
                                      interface_name: Optional[str] = None) -> Shape:
    """Async twin of parse_interface_text; parsing runs in a worker thread."""
    if not isinstance(text, str):
        raise ImporterParseError("interface text must be a string")
    return await asyncio.to_thread(parse_interface_text, text, interface_name)
