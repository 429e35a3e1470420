"""
Catalog Line Tokenizer

Splits one line of comma-delimited catalog text into field strings.

Quoting rules:
- A double quote at the start of a field opens a quoted section; commas
  inside it are literal
- A quote anywhere else in a field is kept as a literal character
- A doubled quote ("") inside a quoted section is a literal quote
- An unterminated quote runs to the end of the line (no error)

Schema problems are reported by the catalog loader, never here.
"""

from typing import Iterable, Iterator, List

DELIMITER = ","
QUOTE = '"'


def split_line(line: str, delimiter: str = DELIMITER, quote: str = QUOTE) -> List[str]:
    """
    Tokenize a single line (without its newline) into fields.

    Args:
        line: Raw line text
        delimiter: Field separator character
        quote: Quote character

    Returns:
        List of field strings; always at least one element

    Examples:
        split_line('a,"b,c","d""e",f') -> ['a', 'b,c', 'd"e', 'f']
        split_line('') -> ['']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    was_quoted = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == quote:
            if in_quotes and i + 1 < length and line[i + 1] == quote:
                current.append(quote)
                i += 2
                continue
            if in_quotes:
                in_quotes = False
            elif not current and not was_quoted:
                in_quotes = was_quoted = True
            else:
                current.append(char)
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
            was_quoted = False
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def strip_line_ending(raw: str) -> str:
    """Remove one trailing newline and one trailing carriage return."""
    if raw.endswith("\n"):
        raw = raw[:-1]
    if raw.endswith("\r"):
        raw = raw[:-1]
    return raw


def iter_rows(lines: Iterable[str], delimiter: str = DELIMITER, quote: str = QUOTE) -> Iterator[List[str]]:
    """Tokenize every non-blank line of ``lines``."""
    for raw in lines:
        line = strip_line_ending(raw)
        if not line.strip():
            continue
        yield split_line(line, delimiter, quote)
