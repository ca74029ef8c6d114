from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import javalang
import tree_sitter_kotlin
from tree_sitter import Language, Node, Parser

from .models import (
    ClassDescriptor,
    FieldSpec,
    LANG_JAVA,
    LANG_KOTLIN,
    LogFn,
    UNRESOLVED_TYPE,
)
from .project import read_text


KOTLIN_SUFFIXES = {".kt", ".kts"}

KOTLIN_LANGUAGE = Language(tree_sitter_kotlin.language())

KT_CLASS = "class_declaration"
KT_OBJECT = "object_declaration"
KT_NAME_NODES = ("type_identifier", "simple_identifier", "identifier")
KT_BODY_NODES = ("class_body", "enum_class_body")
KT_LOCAL_SCOPES = ("function_body", "lambda_literal", "anonymous_initializer")


def detect_language(path: Path) -> str:
    return LANG_KOTLIN if path.suffix.lower() in KOTLIN_SUFFIXES else LANG_JAVA


def resolve_class(path: Optional[Path], on_line: Optional[LogFn] = None) -> Optional[ClassDescriptor]:
    """Find the first class declared in ``path`` and describe it.

    Returns None when there is no file, no class, or the class has no
    usable name.
    """
    if path is None or not path.is_file():
        return None
    source = read_text(path)
    if detect_language(path) == LANG_KOTLIN:
        desc = resolve_kotlin(source, source_path=path)
    else:
        desc = resolve_java(source, source_path=path, on_line=on_line)

    if desc is None or not desc.name or not desc.qualified_name:
        return None

    for f in desc.fields:
        if f.unresolved and on_line:
            on_line(f"[WARN] {desc.name}.{f.name}: type not declared, using '{UNRESOLVED_TYPE}'")
    return desc

# ---------------- java (javalang AST) ----------------

def _java_type_to_str(t) -> str:
    if t is None:
        return UNRESOLVED_TYPE
    text = t.name
    args = getattr(t, "arguments", None)
    if args:
        text += "<" + ", ".join(_java_type_arg_to_str(a) for a in args) + ">"
    sub = getattr(t, "sub_type", None)
    if sub is not None:
        text += "." + _java_type_to_str(sub)
    return text + "[]" * len(t.dimensions or [])

def _java_type_arg_to_str(arg) -> str:
    if arg.type is None:
        return "?"
    inner = _java_type_to_str(arg.type)
    if arg.pattern_type in ("extends", "super"):
        return f"? {arg.pattern_type} {inner}"
    return inner

def _java_members(type_decl) -> Sequence:
    body = getattr(type_decl, "body", None) or []
    # enum bodies keep members under .declarations
    if hasattr(body, "declarations"):
        return body.declarations or []
    return body

def java_fields(type_decl) -> List[FieldSpec]:
    fields: List[FieldSpec] = []
    for node in _java_members(type_decl):
        if not isinstance(node, javalang.tree.FieldDeclaration):
            continue
        if getattr(node, "modifiers", None) and "static" in node.modifiers:
            continue
        base = _java_type_to_str(node.type)
        for decl in node.declarators:
            extra = "[]" * len(getattr(decl, "dimensions", None) or [])
            fields.append(FieldSpec(name=decl.name, type_text=base + extra))
    return fields

def resolve_java(source: str, source_path: Optional[Path] = None,
                 on_line: Optional[LogFn] = None) -> Optional[ClassDescriptor]:
    try:
        tree = javalang.parse.parse(source)
    except (javalang.parser.JavaSyntaxError, javalang.tokenizer.LexerError) as e:
        if on_line:
            on_line(f"[WARN] Could not parse {source_path or 'source'}: {type(e).__name__}")
        return None

    if not tree.types:
        return None
    t = tree.types[0]
    pkg = tree.package.name if tree.package else ""
    return ClassDescriptor(
        name=t.name,
        qualified_name=f"{pkg}.{t.name}" if pkg else t.name,
        fields=java_fields(t),
        language=LANG_JAVA,
        source_path=source_path,
    )

# ---------------- kotlin (tree-sitter) ----------------

def _text(src: bytes, node: Node) -> str:
    return src[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

def _walk(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _walk(child)

def _first_child(node: Node, types: Sequence[str]) -> Optional[Node]:
    for child in node.children:
        if child.type in types:
            return child
    return None

def _is_comment(node: Node) -> bool:
    return node.type.endswith("comment")

def _declared_type(src: bytes, node: Node) -> str:
    seen_colon = False
    for child in node.children:
        if child.type == ":":
            seen_colon = True
            continue
        if seen_colon and child.is_named and not _is_comment(child):
            return _text(src, child)
    return UNRESOLVED_TYPE

def _has_binding(node: Node) -> bool:
    return any(c.type in ("val", "var", "binding_pattern_kind") for c in node.children)

def _kotlin_name(src: bytes, node: Node) -> Optional[str]:
    name = _first_child(node, KT_NAME_NODES)
    return _text(src, name) if name is not None else None

def _kotlin_package(src: bytes, root: Node) -> str:
    header = _first_child(root, ("package_header",))
    if header is None:
        return ""
    txt = _text(src, header).strip()
    if txt.startswith("package"):
        txt = txt[len("package"):]
    return "".join(txt.split()).rstrip(";")

def _kotlin_enclosing(src: bytes, node: Node) -> List[str]:
    names: List[str] = []
    cur = node.parent
    while cur is not None:
        if cur.type in (KT_CLASS, KT_OBJECT):
            nm = _kotlin_name(src, cur)
            if nm:
                names.insert(0, nm)
        cur = cur.parent
    return names

def _is_local(node: Node) -> bool:
    cur = node.parent
    while cur is not None:
        if cur.type in KT_LOCAL_SCOPES:
            return True
        cur = cur.parent
    return False

def kotlin_fields(src: bytes, class_node: Node) -> List[FieldSpec]:
    fields: List[FieldSpec] = []

    ctor = _first_child(class_node, ("primary_constructor",))
    if ctor is not None:
        for param in _walk(ctor):
            if param.type != "class_parameter" or not _has_binding(param):
                continue
            name = _kotlin_name(src, param)
            if name:
                fields.append(FieldSpec(name=name, type_text=_declared_type(src, param)))

    body = _first_child(class_node, KT_BODY_NODES)
    if body is not None:
        for member in body.children:
            if member.type != "property_declaration":
                continue
            var = _first_child(member, ("variable_declaration",))
            if var is None:
                continue
            name = _kotlin_name(src, var)
            if name:
                fields.append(FieldSpec(name=name, type_text=_declared_type(src, var)))
    return fields

def resolve_kotlin(source: str, source_path: Optional[Path] = None) -> Optional[ClassDescriptor]:
    src = source.encode("utf-8")
    tree = Parser(KOTLIN_LANGUAGE).parse(src)
    root = tree.root_node

    class_node = next((n for n in _walk(root) if n.type == KT_CLASS), None)
    # local classes have no qualified name
    if class_node is None or _is_local(class_node):
        return None
    name = _kotlin_name(src, class_node)
    if not name:
        return None

    pkg = _kotlin_package(src, root)
    qualified = ".".join([*([pkg] if pkg else []), *_kotlin_enclosing(src, class_node), name])
    return ClassDescriptor(
        name=name,
        qualified_name=qualified,
        fields=kotlin_fields(src, class_node),
        language=LANG_KOTLIN,
        source_path=source_path,
    )
