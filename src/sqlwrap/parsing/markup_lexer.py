"""Lexer for the statement markup language."""

import re

import ply.lex as lex

_NAMED_ENTITIES = {"lt": "<", "gt": ">", "amp": "&", "quot": '"', "apos": "'"}

_ENTITY_RE = re.compile(r"&(?:#([0-9]+)|#[xX]([0-9A-Fa-f]+)|(lt|gt|amp|quot|apos));")


def _replace_entity(match: re.Match) -> str:
    decimal, hexadecimal, name = match.groups()
    if name is not None:
        return _NAMED_ENTITIES[name]
    try:
        return chr(int(decimal) if decimal is not None else int(hexadecimal, 16))
    except (ValueError, OverflowError):
        raise SyntaxError(f"Invalid character reference '{match.group(0)}'") from None


def decode_entities(value: str) -> str:
    """Decode predefined entities and numeric character references in one pass.

    ``&amp;#60;`` therefore decodes to the text ``&#60;``, not to ``<``.
    """
    return _ENTITY_RE.sub(_replace_entity, value)


class MarkupLexer:
    """Lexer for tokenizing statement markup.

    Text runs are passed through as TEXT; only ``<name``, ``</name>``,
    comments, declarations and CDATA sections start markup. CDATA content
    is emitted as TEXT verbatim. A ``<`` followed by anything
    else (e.g. ``a < 10``) stays in the text run, so SQL comparisons need
    no escaping.
    """

    tokens = [
        "TEXT",
        "OPEN_TAG",
        "CLOSE_TAG",
        "NAME",
        "EQUALS",
        "STRING",
        "TAG_END",
        "SELF_CLOSE",
    ]

    # Inside a start tag: attributes until '>' or '/>'
    states = (("tag", "exclusive"),)

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    # --- INITIAL state ---

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"<!--[\s\S]*?-->"
        t.lexer.lineno += t.value.count("\n")

    def t_DECLARATION(self, t: lex.LexToken) -> None:
        r"<\?[\s\S]*?\?>"
        t.lexer.lineno += t.value.count("\n")

    def t_CDATA(self, t: lex.LexToken) -> lex.LexToken:
        r"<!\[CDATA\[[\s\S]*?\]\]>"
        # Raw text: no entity decoding
        t.lexer.lineno += t.value.count("\n")
        t.type = "TEXT"
        t.value = t.value[9:-3]
        return t

    def t_CLOSE_TAG(self, t: lex.LexToken) -> lex.LexToken:
        r"</\s*[A-Za-z_][\w.:-]*\s*>"
        t.value = t.value[2:-1].strip()
        return t

    def t_OPEN_TAG(self, t: lex.LexToken) -> lex.LexToken:
        r"<[A-Za-z_][\w.:-]*"
        t.value = t.value[1:]
        t.lexer.begin("tag")
        return t

    def t_TEXT(self, t: lex.LexToken) -> lex.LexToken:
        r"(?:[^<]|<(?![A-Za-z_/?]|!--|!\[CDATA\[))+"
        t.lexer.lineno += t.value.count("\n")
        t.value = decode_entities(t.value)
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal markup '{t.value[:10]}' at line {t.lineno}")

    # --- Exclusive tag state ---

    t_tag_ignore = " \t\r"

    def t_tag_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_tag_SELF_CLOSE(self, t: lex.LexToken) -> lex.LexToken:
        r"/>"
        t.lexer.begin("INITIAL")
        return t

    def t_tag_TAG_END(self, t: lex.LexToken) -> lex.LexToken:
        r">"
        t.lexer.begin("INITIAL")
        return t

    def t_tag_EQUALS(self, t: lex.LexToken) -> lex.LexToken:
        r"="
        return t

    def t_tag_NAME(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z_][\w.:-]*"
        return t

    def t_tag_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"\"[^\"]*\"|'[^']*'"
        t.lexer.lineno += t.value.count("\n")
        t.value = decode_entities(t.value[1:-1])
        return t

    def t_tag_error(self, t: lex.LexToken) -> None:
        t.lexer.begin("INITIAL")
        raise SyntaxError(f"Illegal character '{t.value[0]}' in tag at line {t.lineno}")

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def reset(self) -> None:
        """Return to the initial state and line 1."""
        self.lexer.begin("INITIAL")
        self.lexer.lineno = 1

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.reset()
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
