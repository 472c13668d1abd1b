"""
Tree-sitter helpers for JSX/TSX sources.

All edits are splices into the original bytes at node offsets, so text that is
not touched keeps its exact formatting.
"""

import logging
import secrets
from collections.abc import Iterator
from functools import lru_cache
from typing import Optional

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from sandbox_agent.exceptions import ParseFailure
from sandbox_agent.utils.paths import extension

logger = logging.getLogger(__name__)

OID_ATTRIBUTE = "data-oid"
OID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
OID_LENGTH = 7

PRELOAD_SCRIPT_ID = "onlook-preload-script"
SCRIPT_IMPORT_SOURCE = "next/script"
SCRIPT_COMPONENT = "Script"

_GRAMMARS = {
    ".tsx": "tsx",
    ".ts": "typescript",
    ".jsx": "javascript",
    ".js": "javascript",
}
_FRAGMENT_NAMES = {b"Fragment", b"React.Fragment"}
_TAG_TYPES = ("jsx_opening_element", "jsx_self_closing_element")

Edit = tuple[int, bytes]


@lru_cache(maxsize=None)
def _parser(grammar: str) -> Parser:
    return get_parser(grammar)  # type: ignore[arg-type]


def parse(path: str, source: bytes) -> Tree:
    """Parse a source file, raising ParseFailure if the tree has error nodes."""
    grammar = _GRAMMARS.get(extension(path), "tsx")
    tree = _parser(grammar).parse(source)
    if tree.root_node.has_error:
        raise ParseFailure(f"Failed to get ast for file {path}")
    return tree


def iter_nodes(root: Node) -> Iterator[Node]:
    """Depth-first, source-ordered walk over every node."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def splice(source: bytes, edits: list[Edit]) -> bytes:
    """Insert each edit's bytes at its offset (offsets refer to ``source``)."""
    out = source
    for offset, text in sorted(edits, key=lambda e: e[0], reverse=True):
        out = out[:offset] + text + out[offset:]
    return out


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _unquote(node: Node) -> Optional[str]:
    if node.type == "string":
        return _text(node)[1:-1]
    if node.type == "jsx_expression" and node.named_child_count == 1:
        return _unquote(node.named_children[0])
    return None


def iter_element_tags(root: Node) -> Iterator[Node]:
    """Opening and self-closing tags of named JSX elements (fragments excluded)."""
    for node in iter_nodes(root):
        if node.type not in _TAG_TYPES:
            continue
        name = node.child_by_field_name("name")
        if name is None or name.text in _FRAGMENT_NAMES:
            continue
        yield node


def tag_name(tag: Node) -> str:
    return _text(tag.child_by_field_name("name"))


def tag_attributes(tag: Node) -> dict[str, Node]:
    attributes: dict[str, Node] = {}
    for child in tag.named_children:
        if child.type == "jsx_attribute" and child.named_child_count:
            attributes[_text(child.named_children[0])] = child
    return attributes


def attribute_value(attribute: Node) -> Optional[str]:
    """Literal value of an attribute, or None for bare or computed attributes."""
    if attribute.named_child_count < 2:
        return None
    return _unquote(attribute.named_children[-1])


def attribute_insert_offset(tag: Node) -> int:
    """Offset right after the tag name (and its type arguments, in TSX)."""
    name = tag.child_by_field_name("name")
    end = name.end_byte if name is not None else tag.start_byte + 1
    for child in tag.children:
        if child.type == "type_arguments":
            end = max(end, child.end_byte)
    return end


def generate_oid(taken: set[str]) -> str:
    while True:
        oid = "".join(secrets.choice(OID_ALPHABET) for _ in range(OID_LENGTH))
        if oid not in taken:
            return oid


def collect_oids(path: str, source: bytes) -> list[str]:
    """Sorted identifier values carried by the elements of a source file."""
    oids: list[str] = []
    for tag in iter_element_tags(parse(path, source).root_node):
        attribute = tag_attributes(tag).get(OID_ATTRIBUTE)
        if attribute is not None:
            value = attribute_value(attribute)
            if value:
                oids.append(value)
    return sorted(oids)


def add_oids(path: str, source: bytes) -> tuple[bytes, bool]:
    """
    Give every JSX element lacking a data-oid a fresh one.

    Existing identifiers are never rewritten.

    Returns:
        The new source and whether any identifier was added

    Raises:
        ParseFailure: If the source cannot be parsed
    """
    tree = parse(path, source)
    taken: set[str] = set()
    missing: list[Node] = []
    for tag in iter_element_tags(tree.root_node):
        attribute = tag_attributes(tag).get(OID_ATTRIBUTE)
        if attribute is None:
            missing.append(tag)
            continue
        value = attribute_value(attribute)
        if value:
            taken.add(value)

    edits: list[Edit] = []
    for tag in missing:
        oid = generate_oid(taken)
        taken.add(oid)
        edits.append(
            (attribute_insert_offset(tag), f' {OID_ATTRIBUTE}="{oid}"'.encode("utf-8"))
        )
    return splice(source, edits), bool(edits)


def find_element(root: Node, name: str) -> Optional[Node]:
    """First ``jsx_element`` (with separate open and close tags) called ``name``."""
    for node in iter_nodes(root):
        if node.type != "jsx_element" or not node.children:
            continue
        opening = node.children[0]
        if opening.type == "jsx_opening_element" and tag_name(opening) == name:
            return node
    return None


def script_import_name(root: Node) -> Optional[str]:
    """Local name of the default import from next/script, if the file has one."""
    for node in root.named_children:
        if node.type != "import_statement":
            continue
        source = node.child_by_field_name("source")
        if source is None or _unquote(source) != SCRIPT_IMPORT_SOURCE:
            continue
        for child in node.named_children:
            if child.type != "import_clause":
                continue
            for part in child.named_children:
                if part.type == "identifier":
                    return _text(part)
    return None


def has_preload_script(root: Node) -> bool:
    for tag in iter_element_tags(root):
        attribute = tag_attributes(tag).get("id")
        if attribute is not None and attribute_value(attribute) == PRELOAD_SCRIPT_ID:
            return True
    return False


def _import_offset(root: Node) -> int:
    # after a leading directive prologue such as "use client"
    offset = 0
    for node in root.named_children:
        if node.type == "comment":
            continue
        if (
            node.type == "expression_statement"
            and node.named_child_count == 1
            and node.named_children[0].type == "string"
        ):
            offset = node.end_byte
            continue
        break
    return offset


def _line_indent(source: bytes, offset: int) -> Optional[bytes]:
    """Whitespace before ``offset`` on its line, or None if other text precedes it."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    prefix = source[line_start:offset]
    return prefix if not prefix.strip() else None


def inject_preload_script(path: str, source: bytes, script_src: str) -> tuple[bytes, bool]:
    """
    Add the preload <Script> to the end of <body>, importing Script if needed.

    Running it on a file that already has the script changes nothing.

    Returns:
        The new source and whether anything was injected

    Raises:
        ParseFailure: If the source cannot be parsed
    """
    root = parse(path, source).root_node
    if has_preload_script(root):
        return source, False

    body = find_element(root, "body")
    if body is None or body.children[-1].type != "jsx_closing_element":
        logger.warning(f"No <body> element in {path}; preload script not injected")
        return source, False

    edits: list[Edit] = []
    component = script_import_name(root)
    if component is None:
        component = SCRIPT_COMPONENT
        statement = f'import {component} from "{SCRIPT_IMPORT_SOURCE}";'
        offset = _import_offset(root)
        text = statement + "\n" if offset == 0 else "\n" + statement
        edits.append((offset, text.encode("utf-8")))

    element = (
        f'<{component} id="{PRELOAD_SCRIPT_ID}" src="{script_src}" '
        f'strategy="afterInteractive" type="module" />'
    )
    close_tag = body.children[-1]
    indent = _line_indent(source, close_tag.start_byte)
    if indent is None:
        text = element
    else:
        text = "    " + element + "\n" + indent.decode("utf-8")
    edits.append((close_tag.start_byte, text.encode("utf-8")))
    return splice(source, edits), True
