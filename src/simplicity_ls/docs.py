from __future__ import annotations

from typing import List, Sequence

DOC_MARKER = "///"
MARKDOWN_BLOCK_PREFIXES = ("#", "-", "*", ">", "```")
CODE_INDENT = "    "


def extract_docs(line: int, lines: Sequence[str]) -> str:
    """Collect the ``///`` comment block directly above ``line`` as markdown.

    ``line`` is the 0-based index of the declaration. Scanning stops at the
    first line above it that is not a doc comment.
    """
    if line == 0:
        return ""

    collected: list[str] = []
    for index in range(min(line, len(lines)) - 1, -1, -1):
        text = lines[index]
        if not text.startswith(DOC_MARKER):
            break
        collected.append(text[len(DOC_MARKER):].rstrip())
    collected.reverse()
    return reflow(collected)


def reflow(lines: List[str]) -> str:
    """Join prose lines with spaces, keep markdown block lines on their own."""
    result = ""
    prev_line_was_text = False
    for raw in lines:
        trimmed = raw.strip()
        is_md_block = not trimmed or trimmed.startswith(MARKDOWN_BLOCK_PREFIXES) or _is_code_line(raw)

        if not result:
            result = trimmed
        elif prev_line_was_text and not is_md_block:
            result += " " + trimmed
        else:
            result += "\n" + trimmed

        prev_line_was_text = bool(trimmed) and not is_md_block
    return result


def _is_code_line(raw: str) -> bool:
    # ``/// text`` carries one separator space before the content.
    body = raw[1:] if raw.startswith(" ") else raw
    return body.startswith(CODE_INDENT)
