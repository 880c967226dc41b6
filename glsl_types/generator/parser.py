"""
Declaration parser for GLSL shaders.

Only top-level interface declarations and struct definitions are parsed.
Every other statement (functions, precision statements, plain globals) is
skipped by brace-depth-aware scanning, so shader bodies never need a full
expression grammar.
"""

import re
from collections.abc import Iterable

from glsl_types.generator.errors import ParseError, UnresolvedArrayLengthWarning
from glsl_types.generator.lexer import AUXILIARY_QUALIFIERS, QUALIFIERS, Token, TokenKind
from glsl_types.generator.models import (
    ParsedDeclaration,
    ParsedField,
    ParsedStruct,
    ParsedUnit,
    Qualifier,
    SourceLocation,
    TypeSpec,
)

_INCLUDE_RE = re.compile(r'^#\s*include\s*(?:"([^"]*)"|<([^>]*)>)')
_INTEGER_RE = re.compile(r"^(0[xX][0-9a-fA-F]+|\d+)[uU]?$")

# Identifiers with this prefix are reserved for builtins
_BUILTIN_PREFIX = "gl_"

_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = {"}", ")", "]"}
_WORD_KINDS = (
    TokenKind.IDENTIFIER,
    TokenKind.KEYWORD,
    TokenKind.QUALIFIER,
    TokenKind.TYPE_NAME,
    TokenKind.NUMBER,
)


def parse_include(directive: str) -> str | None:
    """Extract the path of an `#include "path"` or `#include <path>` directive."""
    match = _INCLUDE_RE.match(directive.strip())
    if not match:
        return None
    return match.group(1) if match.group(1) is not None else match.group(2)


def parse_integer_literal(text: str) -> int | None:
    """Parse a GLSL integer literal (decimal, octal or hex, optional u suffix)."""
    if not _INTEGER_RE.match(text):
        return None
    digits = text.rstrip("uU")
    if digits[:2] in ("0x", "0X"):
        return int(digits, 16)
    if len(digits) > 1 and digits.startswith("0"):
        try:
            return int(digits, 8)
        except ValueError:
            return None
    return int(digits)


def join_tokens(tokens: Iterable[Token]) -> str:
    """Render a run of tokens back into compact source text."""
    parts: list[str] = []
    prev: Token | None = None
    prev_unary = False
    for tok in tokens:
        if prev is not None:
            no_space = (
                tok.text in (",", ";", ")", "]", ".")
                or prev.text in ("(", "[", ".")
                or (tok.text in ("(", "[") and prev.kind in _WORD_KINDS)
                or (tok.text in ("(", "[") and prev.text == "]")
                or prev_unary
            )
            if not no_space:
                parts.append(" ")
        prev_unary = tok.text in ("-", "+", "!", "~") and (
            prev is None
            or (prev.kind == TokenKind.PUNCTUATION and prev.text not in (")", "]"))
        )
        parts.append(tok.text)
        prev = tok
    return "".join(parts)


class DeclarationParser:
    """Recursive-descent parser for top-level GLSL interface declarations."""

    def __init__(self, tokens: Iterable[Token], file_path: str | None = None):
        self.file_path = file_path
        self.unit = ParsedUnit()
        self.tokens: list[Token] = []
        for tok in tokens:
            if tok.kind == TokenKind.DIRECTIVE:
                self._handle_directive(tok)
            else:
                self.tokens.append(tok)
        self.pos = 0

    # Token stream helpers

    def _peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _at(self, text: str, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok is not None and tok.text == text

    def _location(self, tok: Token) -> SourceLocation:
        return SourceLocation(self.file_path, tok.line, tok.column)

    def _error(self, message: str, tok: Token | None) -> ParseError:
        if tok is None:
            tok = self.tokens[-1] if self.tokens else None
        return ParseError(
            message,
            file_path=self.file_path,
            line=tok.line if tok else None,
            column=tok.column if tok else None,
        )

    def _expect(self, text: str, start: Token, what: str) -> Token:
        tok = self._peek()
        if tok is None or tok.text == "}" and text != "}":
            raise self._error(f"Unterminated {what}: expected '{text}'", start)
        if tok.text != text:
            raise self._error(f"Expected '{text}' in {what}, found '{tok.text}'", tok)
        return self._advance()

    # Entry point

    def parse(self) -> ParsedUnit:
        """Parse the whole token stream.

        Returns:
            The declarations, structs, includes and warnings found

        Raises:
            ParseError: If an interface declaration or struct is malformed
        """
        while self._peek() is not None:
            tok = self._peek()
            assert tok is not None
            if tok.text == ";":
                self._advance()
            elif tok.text == "struct":
                self._parse_struct_statement()
            elif self._starts_interface_statement():
                self._parse_interface_statement()
            else:
                self._skip_statement()
        return self.unit

    def _handle_directive(self, tok: Token) -> None:
        path = parse_include(tok.text)
        if path is not None:
            self.unit.includes.append((path, self._location(tok)))

    def _skip_statement(self) -> None:
        """Skip to the end of the current top-level statement.

        The statement ends at a `;` at depth 0 or at the `}` closing a block
        opened at depth 0 (function bodies).
        """
        depth = 0
        while self._peek() is not None:
            tok = self._advance()
            if tok.text in _OPENERS:
                depth += 1
            elif tok.text in _CLOSERS:
                if depth == 0:
                    # Stray closing token, nothing to balance
                    continue
                depth -= 1
                if depth == 0 and tok.text == "}":
                    if self._at(";"):
                        self._advance()
                    return
            elif tok.text == ";" and depth == 0:
                return

    def _skip_group(self, start: Token) -> list[Token]:
        """Consume a balanced (), [] or {} group starting at the current token.

        Returns:
            The tokens strictly inside the group
        """
        opener = self._advance()
        closer = _OPENERS[opener.text]
        inner: list[Token] = []
        depth = 1
        while True:
            tok = self._peek()
            if tok is None:
                raise self._error(f"Unterminated '{opener.text}'", start)
            self._advance()
            if tok.text == opener.text:
                depth += 1
            elif tok.text == closer:
                depth -= 1
                if depth == 0:
                    return inner
            inner.append(tok)

    # Qualifiers

    def _scan_qualifiers(self, offset: int = 0) -> tuple[list[Token], int]:
        """Scan a run of storage and auxiliary qualifiers starting at `offset`.

        Returns:
            Tuple of (storage qualifier tokens, offset of the first token
            after the run)
        """
        storage: list[Token] = []
        while True:
            tok = self._peek(offset)
            if tok is None:
                return storage, offset
            if tok.text in QUALIFIERS:
                storage.append(tok)
                offset += 1
            elif tok.text == "layout":
                offset += 1
                if self._at("(", offset):
                    depth = 0
                    while (inner := self._peek(offset)) is not None:
                        offset += 1
                        if inner.text == "(":
                            depth += 1
                        elif inner.text == ")":
                            depth -= 1
                            if depth == 0:
                                break
            elif tok.text in AUXILIARY_QUALIFIERS:
                offset += 1
            else:
                return storage, offset

    def _starts_interface_statement(self) -> bool:
        storage, _ = self._scan_qualifiers()
        return any(Qualifier.from_keyword(tok.text) is not None for tok in storage)

    def _resolve_qualifier(self, storage: list[Token]) -> tuple[Qualifier, Token] | None:
        """Pick the storage qualifier of a declaration.

        A repeated qualifier is ignored; two different ones are an error.
        Statements using storage qualifiers outside the interface set
        (buffer, shared, inout) yield None and are skipped.
        """
        if any(Qualifier.from_keyword(tok.text) is None for tok in storage):
            return None
        first = storage[0]
        qualifier = Qualifier.from_keyword(first.text)
        assert qualifier is not None
        for tok in storage[1:]:
            other = Qualifier.from_keyword(tok.text)
            if other != qualifier:
                raise self._error(
                    f"Conflicting qualifiers '{first.text}' and '{tok.text}'", tok
                )
        return qualifier, first

    # Types and declarators

    def _is_type_token(self, tok: Token | None) -> bool:
        return tok is not None and tok.kind in (TokenKind.TYPE_NAME, TokenKind.IDENTIFIER)

    def _parse_dims(self, start: Token) -> list[tuple[int | None, Token]]:
        dims: list[tuple[int | None, Token]] = []
        while self._at("["):
            bracket = self._peek()
            assert bracket is not None
            inner = self._skip_group(start)
            length = None
            if len(inner) == 1 and inner[0].kind == TokenKind.NUMBER:
                length = parse_integer_literal(inner[0].text)
            dims.append((length, bracket))
        return dims

    def _warn_unresolved_dims(
        self, name: str, dims: list[tuple[int | None, Token]]
    ) -> None:
        for length, bracket in dims:
            if length is None:
                self.unit.warnings.append(
                    UnresolvedArrayLengthWarning(
                        f"Array '{name}' has no literal length, "
                        "binding it as a dynamically-sized array",
                        file_path=self.file_path,
                        line=bracket.line,
                    )
                )

    def _parse_member_list(
        self, owner: Token, what: str
    ) -> list[tuple[str, TypeSpec, Token]]:
        """Parse `{ type name[N], name; ... }` of a struct or interface block."""
        self._expect("{", owner, what)
        members: list[tuple[str, TypeSpec, Token]] = []
        while True:
            tok = self._peek()
            if tok is None:
                raise self._error(f"Unterminated {what}", owner)
            if tok.text == "}":
                self._advance()
                return members
            _, offset = self._scan_qualifiers()
            self.pos += offset
            type_tok = self._peek()
            if not self._is_type_token(type_tok):
                found = type_tok.text if type_tok else "end of file"
                raise self._error(
                    f"Expected a member type in {what}, found '{found}'", type_tok or owner
                )
            assert type_tok is not None
            self._advance()
            type_dims = self._parse_dims(owner)
            while True:
                name_tok = self._peek()
                if name_tok is None or name_tok.kind != TokenKind.IDENTIFIER:
                    if name_tok is None or name_tok.text == "}":
                        raise self._error(f"Unterminated {what}", owner)
                    raise self._error(
                        f"Expected a member name in {what}, found '{name_tok.text}'", name_tok
                    )
                self._advance()
                name_dims = self._parse_dims(owner)
                self._warn_unresolved_dims(name_tok.text, name_dims + type_dims)
                dims = tuple(length for length, _ in name_dims + type_dims)
                members.append((name_tok.text, TypeSpec(type_tok, dims), name_tok))
                if self._at(","):
                    self._advance()
                    continue
                self._expect(";", owner, what)
                break

    # Statements

    def _parse_struct_body(self, struct_tok: Token) -> ParsedStruct | None:
        """Parse `struct Name { ... }` with the `struct` keyword already current."""
        self._advance()
        name_tok = self._peek()
        if name_tok is None:
            raise self._error("Unterminated struct definition", struct_tok)
        if name_tok.text == "{":
            # Anonymous struct, nothing to bind
            self._skip_group(struct_tok)
            return None
        if not self._is_type_token(name_tok):
            raise self._error(f"Expected a struct name, found '{name_tok.text}'", name_tok)
        self._advance()
        members = self._parse_member_list(struct_tok, f"struct '{name_tok.text}'")
        struct = ParsedStruct(
            name=name_tok.text,
            fields=tuple(ParsedField(name, spec) for name, spec, _ in members),
            location=self._location(name_tok),
        )
        self.unit.structs.append(struct)
        return struct

    def _parse_struct_statement(self) -> None:
        struct_tok = self._peek()
        assert struct_tok is not None
        struct = self._parse_struct_body(struct_tok)
        if struct is not None and self._at(";"):
            self._advance()
            return
        # Plain global variables of the struct type are not part of the interface
        self._skip_statement()

    def _parse_interface_statement(self) -> None:
        start = self._peek()
        assert start is not None
        storage, offset = self._scan_qualifiers()
        resolved = self._resolve_qualifier(storage)
        if resolved is None:
            self._skip_statement()
            return
        qualifier, keyword_tok = resolved
        if self._at(";", offset) and any(
            tok.text == "layout" for tok in self.tokens[self.pos : self.pos + offset]
        ):
            # Default layout such as `layout(std140) uniform;` declares nothing
            self._skip_statement()
            return
        self.pos += offset

        type_tok = self._peek()
        if type_tok is not None and type_tok.text == "struct":
            struct = self._parse_struct_body(type_tok)
            if struct is None:
                self._skip_statement()
                return
            type_tok = Token(
                TokenKind.IDENTIFIER,
                struct.name,
                struct.location.line,
                struct.location.column,
            )
            self._parse_declarators(start, qualifier, keyword_tok, type_tok, [])
            return

        if not self._is_type_token(type_tok):
            found = "end of file" if type_tok is None else f"'{type_tok.text}'"
            raise self._error(
                f"Expected a type after '{keyword_tok.text}', found {found}",
                type_tok or keyword_tok,
            )
        assert type_tok is not None
        self._advance()

        if self._at("{"):
            self._parse_interface_block(start, qualifier, keyword_tok, type_tok)
            return

        type_dims = self._parse_dims(start)
        self._parse_declarators(start, qualifier, keyword_tok, type_tok, type_dims)

    def _parse_declarators(
        self,
        start: Token,
        qualifier: Qualifier,
        keyword_tok: Token,
        type_tok: Token,
        type_dims: list[tuple[int | None, Token]],
    ) -> None:
        what = f"'{keyword_tok.text}' declaration"
        while True:
            name_tok = self._peek()
            if name_tok is None or name_tok.text == "}":
                raise self._error(f"Unterminated {what}", start)
            if name_tok.kind != TokenKind.IDENTIFIER:
                if name_tok.text == ";" and type_tok.text.startswith(_BUILTIN_PREFIX):
                    # Qualifier-only redeclaration of a builtin, `out gl_Position;`
                    self._advance()
                    return
                raise self._error(
                    f"Expected a name in {what}, found '{name_tok.text}'", name_tok
                )
            self._advance()

            if self._at("("):
                # A function whose return type carries a qualifier, not a declaration
                self._skip_statement()
                return

            name_dims = self._parse_dims(start)
            all_dims = name_dims + type_dims
            self._warn_unresolved_dims(name_tok.text, all_dims)

            initializer = None
            if self._at("="):
                self._advance()
                initializer = join_tokens(self._scan_initializer(start, what))

            if not name_tok.text.startswith(_BUILTIN_PREFIX):
                self.unit.declarations.append(
                    ParsedDeclaration(
                        qualifier=qualifier,
                        keyword=keyword_tok.text,
                        spec=TypeSpec(type_tok, tuple(length for length, _ in all_dims)),
                        name=name_tok.text,
                        location=self._location(name_tok),
                        initializer=initializer,
                    )
                )

            if self._at(","):
                self._advance()
                continue
            self._expect(";", start, what)
            return

    def _scan_initializer(self, start: Token, what: str) -> list[Token]:
        tokens: list[Token] = []
        while True:
            tok = self._peek()
            if tok is None or tok.text == "}":
                raise self._error(f"Unterminated {what}", start)
            if tok.text in (",", ";"):
                return tokens
            if tok.text in _OPENERS:
                opener = tok
                inner = self._skip_group(start)
                tokens.append(opener)
                tokens.extend(inner)
                tokens.append(
                    Token(TokenKind.PUNCTUATION, _OPENERS[opener.text], tok.line, tok.column)
                )
                continue
            tokens.append(self._advance())

    def _parse_interface_block(
        self, start: Token, qualifier: Qualifier, keyword_tok: Token, block_tok: Token
    ) -> None:
        """Parse `uniform Block { ... } instance;`.

        A named instance becomes a struct plus one declaration; members of an
        anonymous block are exposed as individual declarations.
        """
        what = f"interface block '{block_tok.text}'"
        members = self._parse_member_list(start, what)

        if block_tok.text.startswith(_BUILTIN_PREFIX):
            # Builtin block redeclaration such as gl_PerVertex
            self._skip_statement()
            return

        instance_tok = self._peek()
        if instance_tok is not None and instance_tok.kind == TokenKind.IDENTIFIER:
            self._advance()
            dims = self._parse_dims(start)
            self._warn_unresolved_dims(instance_tok.text, dims)
            self._expect(";", start, what)
            self.unit.structs.append(
                ParsedStruct(
                    name=block_tok.text,
                    fields=tuple(ParsedField(name, spec) for name, spec, _ in members),
                    location=self._location(block_tok),
                )
            )
            self.unit.declarations.append(
                ParsedDeclaration(
                    qualifier=qualifier,
                    keyword=keyword_tok.text,
                    spec=TypeSpec(
                        Token(TokenKind.IDENTIFIER, block_tok.text, block_tok.line, block_tok.column),
                        tuple(length for length, _ in dims),
                    ),
                    name=instance_tok.text,
                    location=self._location(instance_tok),
                )
            )
            return

        self._expect(";", start, what)
        for name, spec, name_tok in members:
            self.unit.declarations.append(
                ParsedDeclaration(
                    qualifier=qualifier,
                    keyword=keyword_tok.text,
                    spec=spec,
                    name=name,
                    location=self._location(name_tok),
                )
            )


def parse_declarations(
    tokens: Iterable[Token], file_path: str | None = None
) -> ParsedUnit:
    """Recognize the interface declarations, structs and includes of a shader.

    Args:
        tokens: Token stream of one file
        file_path: Path of the file, used in diagnostics

    Returns:
        ParsedUnit with declarations, structs, include paths and warnings

    Raises:
        ParseError: If a declaration or struct definition is malformed
    """
    return DeclarationParser(tokens, file_path).parse()
