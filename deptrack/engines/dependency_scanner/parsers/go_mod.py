"""Parser for Go go.mod files."""

from __future__ import annotations

import json
from typing import NamedTuple

from deptrack.engines.dependency_scanner.models import DependencyRecord
from deptrack.engines.dependency_scanner.registry import register_parser
from deptrack.exceptions import ManifestParseError

_DIRECTIVES = frozenset(
    {
        "module",
        "go",
        "toolchain",
        "godebug",
        "require",
        "replace",
        "exclude",
        "retract",
        "tool",
        "ignore",
    }
)


class _Token(NamedTuple):
    text: str
    punct: bool = False


# Only these separate tokens within a line; lines end at "\n".
_BLANK = " \t\r"

_LPAREN = _Token("(", punct=True)
_RPAREN = _Token(")", punct=True)


def _tokenize(line: str, lineno: int) -> list[_Token]:
    """Split one go.mod line into tokens, dropping any ``//`` comment."""
    tokens: list[_Token] = []
    i, n = 0, len(line)
    while i < n:
        ch = line[i]
        if ch in _BLANK:
            i += 1
            continue
        if line.startswith("//", i):
            break
        if ch == "(":
            tokens.append(_LPAREN)
            i += 1
        elif ch == ")":
            tokens.append(_RPAREN)
            i += 1
        elif ch == '"':
            j = i + 1
            while j < n and line[j] != '"':
                j += 2 if line[j] == "\\" else 1
            if j >= n:
                raise ManifestParseError("unterminated quoted string", lineno)
            try:
                tokens.append(_Token(json.loads(line[i : j + 1])))
            except ValueError as exc:
                raise ManifestParseError(f"invalid quoted string {line[i:j + 1]}", lineno) from exc
            i = j + 1
        elif ch == "`":
            j = line.find("`", i + 1)
            if j == -1:
                raise ManifestParseError("unterminated raw string", lineno)
            tokens.append(_Token(line[i + 1 : j]))
            i = j + 1
        else:
            j = i
            while (
                j < n
                and line[j] not in _BLANK
                and line[j] not in '()"`'
                and not line.startswith("//", j)
            ):
                j += 1
            tokens.append(_Token(line[i:j]))
            i = j
    return tokens


class GoModParser:
    """Extracts the ``require`` list; ``replace``, ``exclude`` and the rest are ignored.

    Indirect requirements are kept. Blocks may be written across lines or
    on one line (``require ( "a.b/c" v1.2.3 )``).
    """

    format = "go-mod"

    def parse(self, content: bytes) -> list[DependencyRecord]:
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestParseError("go.mod is not valid UTF-8") from exc

        deps: list[DependencyRecord] = []
        block: str | None = None
        block_line = 0

        for lineno, raw_line in enumerate(text.split("\n"), start=1):
            raw_line = raw_line.removesuffix("\r")
            tokens = _tokenize(raw_line, lineno)
            if not tokens:
                continue

            if block is None:
                head = tokens[0]
                if head.punct:
                    raise ManifestParseError(f"unexpected {head.text!r}", lineno)
                if head.text not in _DIRECTIVES:
                    raise ManifestParseError(f"unknown directive: {head.text}", lineno)
                if len(tokens) > 1 and tokens[1] == _LPAREN:
                    block, block_line = head.text, lineno
                    tokens = tokens[2:]
                    if not tokens:
                        continue
                else:
                    self._directive(head.text, tokens[1:], lineno, deps)
                    continue

            # Inside a block: an entry, a closing paren, or both.
            if _RPAREN in tokens:
                close = tokens.index(_RPAREN)
                if tokens[close + 1 :]:
                    raise ManifestParseError("unexpected tokens after ')'", lineno)
                if close:
                    self._directive(block, tokens[:close], lineno, deps)
                block = None
            else:
                self._directive(block, tokens, lineno, deps)

        if block is not None:
            raise ManifestParseError(f"unterminated {block} block", block_line)
        return deps

    @staticmethod
    def _directive(
        verb: str, args: list[_Token], lineno: int, deps: list[DependencyRecord]
    ) -> None:
        if any(t.punct for t in args):
            raise ManifestParseError(f"unexpected parenthesis in {verb} directive", lineno)
        if verb == "module" and len(args) != 1:
            raise ManifestParseError("usage: module module/path", lineno)
        if verb != "require":
            return

        if len(args) != 2:
            raise ManifestParseError("usage: require module/path v1.2.3", lineno)
        path, version = args[0].text, args[1].text
        if not path:
            raise ManifestParseError("empty module path in require", lineno)
        if not version.startswith("v"):
            raise ManifestParseError(f"invalid version {version!r} for {path}", lineno)
        deps.append(DependencyRecord(path=path, version=version))


register_parser(GoModParser())
