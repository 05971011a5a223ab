"""Field paths locating a value inside an item: ``_items[2].title``.

A key containing ``.``, ``[``, ``]`` or ``\\`` has those characters escaped with a backslash.
"""

import re

PathToken = str | int

_TOKEN_RE = re.compile(r"((?:[^.\[\]\\]|\\.)+)|\[(\d+)\]|(\.)")
_SPECIAL_RE = re.compile(r"([.\[\]\\])")
_ESCAPED_RE = re.compile(r"\\(.)")


def format_path(tokens: list[PathToken] | tuple[PathToken, ...]) -> str:
    """Join keys with dots and render list indices in brackets."""
    out: list[str] = []
    for token in tokens:
        if isinstance(token, int):
            out.append(f"[{token}]")
        else:
            if out:
                out.append(".")
            out.append(_SPECIAL_RE.sub(r"\\\1", token))
    return "".join(out)


def parse_path(path: str) -> list[PathToken]:
    """Invert ``format_path``.

    Raises:
        ValueError: If path is empty or malformed.
    """
    if not path:
        msg = "empty field path"
        raise ValueError(msg)

    tokens: list[PathToken] = []
    pos = 0
    expect_key = True
    while pos < len(path):
        match = _TOKEN_RE.match(path, pos)
        if match is None:
            msg = f"malformed field path {path!r} at position {pos}"
            raise ValueError(msg)
        key, index, dot = match.groups()
        if key is not None:
            if not expect_key:
                msg = f"malformed field path {path!r}: missing '.' before {key!r}"
                raise ValueError(msg)
            tokens.append(_ESCAPED_RE.sub(r"\1", key))
            expect_key = False
        elif index is not None:
            if expect_key and tokens:
                msg = f"malformed field path {path!r}: index after '.'"
                raise ValueError(msg)
            tokens.append(int(index))
            expect_key = False
        else:
            if expect_key:
                msg = f"malformed field path {path!r}: unexpected '.'"
                raise ValueError(msg)
            expect_key = True
        pos = match.end()

    if expect_key:
        msg = f"malformed field path {path!r}: trailing '.'"
        raise ValueError(msg)
    return tokens
