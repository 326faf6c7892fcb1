"""
Idempotent edits for shared TypeScript output files.

A TypeScriptSourceFile is read in full, queried for existing declarations by
a stable key (module specifier, function name, route method + path, literal
statement), extended only with what is missing, and written back in full.
Re-running the same edits on the result is a no-op.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .errors import SourceParseError
from .logger import LogSink, get_default_logger


IMPORT_REGEX = re.compile(
    r"^[ \t]*import\s+(?P<type_only>type\s+)?(?P<clause>[^;'\"]*?)\s*from\s*"
    r"(?P<quote>[\"'])(?P<module>[^\"']+)(?P=quote)[ \t]*;?[ \t]*$",
    re.MULTILINE,
)
CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}
REGEX_PRECEDING_CHARS = set("(,=:[!&|?{};+-*%<>~^")
REGEX_PRECEDING_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete",
    "void", "throw", "case", "do", "else", "yield", "await",
}


# ============================================================
# Import declarations
# ============================================================

@dataclass
class ImportDeclaration:
    """One `import ... from "module";` statement and where it sits in the text."""
    module_specifier: str
    named_imports: list[str] = field(default_factory=list)
    default_import: Optional[str] = None
    namespace_import: Optional[str] = None
    is_type_only: bool = False
    quote: str = '"'
    start: int = -1
    end: int = -1

    def named_import_names(self) -> set[str]:
        """Local names bound by the named imports (`a as b` binds `b`)."""
        names: set[str] = set()
        for specifier in self.named_imports:
            specifier = re.sub(r"^type\s+", "", specifier)
            names.add(specifier.split(" as ")[-1].strip())
        return names

    def render(self) -> str:
        clause_parts: list[str] = []
        if self.default_import:
            clause_parts.append(self.default_import)
        if self.namespace_import:
            clause_parts.append(f"* as {self.namespace_import}")
        elif self.named_imports:
            clause_parts.append("{ " + ", ".join(self.named_imports) + " }")
        type_keyword = "type " if self.is_type_only else ""
        quote = self.quote
        return f"import {type_keyword}{', '.join(clause_parts)} from {quote}{self.module_specifier}{quote};"


def parse_import_clause(clause: str) -> tuple[Optional[str], Optional[str], list[str]]:
    """Split an import clause into (default, namespace, named)."""
    named: list[str] = []
    braces = re.search(r"\{(?P<body>.*)\}", clause, re.DOTALL)
    if braces:
        named = [part.strip() for part in braces.group("body").split(",") if part.strip()]
        clause = clause[: braces.start()] + clause[braces.end():]

    default_import: Optional[str] = None
    namespace_import: Optional[str] = None
    for part in (piece.strip() for piece in clause.split(",")):
        if not part:
            continue
        namespace = re.fullmatch(r"\*\s+as\s+([A-Za-z_$][A-Za-z0-9_$]*)", part)
        if namespace:
            namespace_import = namespace.group(1)
        else:
            default_import = part
    return default_import, namespace_import, named


# ============================================================
# Structural scan
# ============================================================

def _line_and_column(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _starts_regex_literal(text: str, index: int, previous: Optional[str]) -> bool:
    """A `/` opens a regex literal when it sits where an expression may start."""
    if previous is None or previous in REGEX_PRECEDING_CHARS:
        return True
    if previous.isalnum() or previous in "_$":
        word = re.search(r"[A-Za-z_$][A-Za-z0-9_$]*$", text[max(0, index - 32):index].rstrip())
        return bool(word) and word.group(0) in REGEX_PRECEDING_KEYWORDS
    return False


def check_source_structure(text: str, file_label: str = "<source>") -> None:
    """
    Raise SourceParseError unless strings, comments, template literals,
    regex literals and (), [], {} pairs are all balanced.
    """
    stack: list[tuple[str, int]] = []
    index = 0
    length = len(text)
    # last significant character outside comments, for regex-vs-division
    previous: Optional[str] = None

    def fail(message: str, offset: int) -> None:
        line, column = _line_and_column(text, offset)
        raise SourceParseError(f"Cannot parse {file_label}:{line}:{column}: {message}")

    while index < length:
        char = text[index]
        top = stack[-1][0] if stack else None

        if top == "`":
            if char == "\\":
                index += 2
                continue
            if char == "`":
                stack.pop()
                previous = "`"
            elif char == "$" and text.startswith("{", index + 1):
                stack.append(("${", index))
                previous = "{"
                index += 2
                continue
            index += 1
            continue

        if char.isspace():
            index += 1
            continue

        if char in "\"'":
            cursor = index + 1
            while cursor < length and text[cursor] != char:
                if text[cursor] == "\\":
                    cursor += 1
                elif text[cursor] == "\n":
                    fail("unterminated string literal", index)
                cursor += 1
            if cursor >= length:
                fail("unterminated string literal", index)
            previous = char
            index = cursor + 1
            continue

        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline + 1
            continue

        if text.startswith("/*", index):
            comment_end = text.find("*/", index + 2)
            if comment_end == -1:
                fail("unterminated block comment", index)
            index = comment_end + 2
            continue

        if char == "/" and _starts_regex_literal(text, index, previous):
            cursor = index + 1
            in_class = False
            while cursor < length and text[cursor] != "\n":
                if text[cursor] == "\\":
                    cursor += 2
                    continue
                if in_class:
                    in_class = text[cursor] != "]"
                elif text[cursor] == "[":
                    in_class = True
                elif text[cursor] == "/":
                    break
                cursor += 1
            if cursor >= length or text[cursor] != "/":
                fail("unterminated regex literal", index)
            cursor += 1
            while cursor < length and text[cursor].isalpha():
                cursor += 1
            # a regex literal is a value, so a following `/` divides
            previous = "a"
            index = cursor
            continue

        if char == "`" or char in "([{":
            stack.append((char, index))
        elif char in CLOSING_BRACKETS:
            if not stack:
                fail(f"unexpected {char!r}", index)
            opener, _ = stack.pop()
            expected = "${" if opener == "${" else CLOSING_BRACKETS[char]
            if opener != expected or (opener == "${" and char != "}"):
                fail(f"mismatched {char!r}", index)
        previous = char
        index += 1

    if stack:
        opener, offset = stack[-1]
        fail(f"unclosed {opener!r}", offset)


# ============================================================
# Source file
# ============================================================

class TypeScriptSourceFile:
    """
    Read-modify-write wrapper around one .ts file.

    States: absent on disk (`is_new`), freshly scaffolded, populated. All
    add_* methods are no-ops when the target symbol is already present.
    """

    def __init__(self, path: str | Path, text: str = "", *, is_new: bool = True, logger: LogSink | None = None) -> None:
        self.path = Path(path)
        self.text = text
        self.is_new = is_new
        self.logger = logger or get_default_logger()
        check_source_structure(self.text, str(self.path))

    @classmethod
    def open(cls, path: str | Path, *, overwrite: bool = False, logger: LogSink | None = None) -> "TypeScriptSourceFile":
        """Load `path` if it exists (unless overwriting), otherwise start empty."""
        file_path = Path(path)
        if file_path.exists() and not overwrite:
            return cls(file_path, file_path.read_text(encoding="utf-8"), is_new=False, logger=logger)
        return cls(file_path, "", is_new=True, logger=logger)

    # ---- queries ----

    def contains(self, snippet: str) -> bool:
        return snippet in self.text

    def get_import_declarations(self) -> list[ImportDeclaration]:
        declarations: list[ImportDeclaration] = []
        for match in IMPORT_REGEX.finditer(self.text):
            default_import, namespace_import, named = parse_import_clause(match.group("clause"))
            declarations.append(
                ImportDeclaration(
                    module_specifier=match.group("module"),
                    named_imports=named,
                    default_import=default_import,
                    namespace_import=namespace_import,
                    is_type_only=bool(match.group("type_only")),
                    quote=match.group("quote"),
                    start=match.start(),
                    end=match.end(),
                )
            )
        return declarations

    def find_imports(self, module_specifier: str) -> list[ImportDeclaration]:
        return [d for d in self.get_import_declarations() if d.module_specifier == module_specifier]

    def has_function(self, function_name: str) -> bool:
        name = re.escape(function_name)
        pattern = (
            rf"(?:^|[\s;])(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*{name}\s*[<(]"
            rf"|(?:^|[\s;])(?:export\s+)?(?:const|let|var)\s+{name}\s*[:=]"
        )
        return re.search(pattern, self.text, re.MULTILINE) is not None

    def has_route(self, method: str, route_path: str, receiver: str = "router") -> bool:
        pattern = rf"\b{re.escape(receiver)}\.{re.escape(method.lower())}\(\s*([\"'`]){re.escape(route_path)}\1"
        return re.search(pattern, self.text) is not None

    # ---- edits ----

    def add_import(
        self,
        module_specifier: str,
        *,
        named: Iterable[str] = (),
        default: Optional[str] = None,
        namespace: Optional[str] = None,
        type_only: bool = False,
    ) -> None:
        """
        Make sure the requested symbols are imported from `module_specifier`.

        An existing declaration for the module is extended only when its
        type-only flag matches; otherwise a second declaration is added.
        """
        requested_named = list(dict.fromkeys(named))
        candidates = [d for d in self.find_imports(module_specifier) if d.is_type_only == type_only]

        if namespace is not None:
            if any(d.namespace_import == namespace for d in candidates):
                return
            self._insert_import(ImportDeclaration(module_specifier, namespace_import=namespace, is_type_only=type_only))
            return

        target: Optional[ImportDeclaration] = None
        for declaration in candidates:
            if declaration.namespace_import is None:
                target = declaration
                break

        if target is None:
            self._insert_import(
                ImportDeclaration(
                    module_specifier,
                    named_imports=requested_named,
                    default_import=default,
                    is_type_only=type_only,
                )
            )
            return

        changed = False
        if default is not None and target.default_import is None:
            target.default_import = default
            changed = True
        existing_names = target.named_import_names()
        for name in requested_named:
            if name not in existing_names:
                target.named_imports.append(name)
                existing_names.add(name)
                changed = True

        if changed:
            self.text = self.text[: target.start] + target.render() + self.text[target.end:]
        else:
            self.logger.debug("TypeScriptSourceFile", f"Import from {module_specifier} already satisfied in {self.path.name}")

    def _insert_import(self, declaration: ImportDeclaration) -> None:
        existing = self.get_import_declarations()
        rendered = declaration.render()
        if existing:
            insert_at = existing[-1].end
            self.text = self.text[:insert_at] + "\n" + rendered + self.text[insert_at:]
            return
        if self.text.strip():
            self.text = rendered + "\n\n" + self.text.lstrip("\n")
        else:
            self.text = rendered + "\n"

    def add_statements(self, statements: str | Iterable[str], *, before: Optional[str] = None) -> None:
        """
        Append statements (separated by a blank line). With `before`, insert
        ahead of the first occurrence of that snippet when present.
        """
        if isinstance(statements, str):
            statements = [statements]
        block = "\n".join(statement.rstrip("\n") for statement in statements)

        if before is not None and before in self.text:
            insert_at = self.text.index(before)
            self.text = self.text[:insert_at] + block + "\n\n" + self.text[insert_at:]
            return

        body = self.text.rstrip("\n")
        self.text = (body + "\n\n" if body else "") + block + "\n"

    def add_statement_once(self, statement: str, *, marker: Optional[str] = None, before: Optional[str] = None) -> bool:
        """Add `statement` unless `marker` (default: the statement itself) is already in the text."""
        if self.contains(marker or statement):
            self.logger.debug("TypeScriptSourceFile", f"Statement already present in {self.path.name}: {marker or statement}")
            return False
        self.add_statements(statement, before=before)
        return True

    def add_function(self, function_name: str, source: str, *, before: Optional[str] = None) -> bool:
        """Append a function unless one with the same name exists."""
        if self.has_function(function_name):
            self.logger.info("TypeScriptSourceFile", f'Function "{function_name}" already exists in {self.path.name} - skipping.')
            return False
        self.add_statements(source, before=before)
        return True

    def add_function_in_order(self, function_name: str, source: str, family_prefix: str) -> bool:
        """
        Add an exported function so the `family_prefix*` functions stay sorted by name.
        Existing members are never moved; a new one goes before the first larger name.
        """
        if self.has_function(function_name):
            self.logger.debug("TypeScriptSourceFile", f'Function "{function_name}" already exists in {self.path.name} - skipping.')
            return False

        family_regex = re.compile(
            rf"^export\s+(?:async\s+)?function\s+({re.escape(family_prefix)}[A-Za-z0-9_$]*)\s*[<(]",
            re.MULTILINE,
        )
        following = [m for m in family_regex.finditer(self.text) if m.group(1) > function_name]
        if not following:
            self.add_statements(source)
            return True

        insert_at = min(following, key=lambda m: m.group(1)).start()
        self.text = self.text[:insert_at] + source.rstrip("\n") + "\n\n" + self.text[insert_at:]
        return True

    def add_route(self, method: str, route_path: str, source: str, *, receiver: str = "router", before: Optional[str] = None) -> bool:
        """Append a route registration unless the same method + path is registered."""
        if self.has_route(method, route_path, receiver):
            self.logger.info("TypeScriptSourceFile", f"Route {method.upper()} {route_path} already exists in {self.path.name} - skipping.")
            return False
        self.add_statements(source, before=before)
        return True

    # ---- persistence ----

    def save(self) -> bool:
        """Write the full text back; returns False when nothing changed on disk."""
        check_source_structure(self.text, str(self.path))
        if self.path.exists() and self.path.read_text(encoding="utf-8") == self.text:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.text, encoding="utf-8")
        self.is_new = False
        return True
