"""Fenced code extraction over generated text.

Extraction runs in two passes:
1. ``collect_code_segments`` lists every fenced segment as (language, code), in order.
2. Pure selectors decide what to do with that list:
   - ``select_renderable``: the first ``html``/``jsx`` segment wins outright;
     otherwise the last JavaScript/CSS/TypeScript segment is wrapped in a
     minimal HTML shell; otherwise nothing is renderable.
   - ``select_primary``: the first segment of any language, for raw copy.
"""

import re
from typing import Optional

from refinementengine.models.extraction import CodeSegment, ExtractionResult, PrimaryCodeBlock

FENCE_PATTERN = re.compile(r"```(\w+)\n([\s\S]*?)```")

DOCUMENT_TAGS = frozenset({"html", "jsx"})
SCRIPT_TAGS = frozenset({"javascript", "js", "css", "typescript", "ts"})

HTML_SHELL = (
    '<html><head><script src="https://cdn.tailwindcss.com"></script>'
    "<style>html, body {{ margin: 0; padding: 0; height: 100%; }}</style></head>"
    "<body><script>{code}</script></body></html>"
)


def collect_code_segments(text: str) -> list[CodeSegment]:
    """Every fenced segment in ``text``, in order of appearance."""
    return [
        CodeSegment(language=match.group(1), code=match.group(2).strip())
        for match in FENCE_PATTERN.finditer(text or "")
    ]


def wrap_in_html_shell(code: str) -> str:
    return HTML_SHELL.format(code=code)


def select_renderable(segments: list[CodeSegment]) -> Optional[str]:
    """Pick the preview document from a list of segments."""
    last_script: Optional[CodeSegment] = None
    for segment in segments:
        if segment.language in DOCUMENT_TAGS:
            return segment.code
        if segment.language in SCRIPT_TAGS:
            last_script = segment

    if last_script is None:
        return None
    return wrap_in_html_shell(last_script.code)


def select_primary(segments: list[CodeSegment]) -> Optional[PrimaryCodeBlock]:
    """First segment of any language, with the tag lower-cased."""
    if not segments:
        return None
    first = segments[0]
    return PrimaryCodeBlock(language=first.language.lower(), code=first.code)


def find_renderable(text: str) -> Optional[str]:
    """HTML document for a live preview of ``text``, or None."""
    return select_renderable(collect_code_segments(text))


def get_primary_code_block(text: str) -> Optional[PrimaryCodeBlock]:
    """First fenced block of ``text``, or None."""
    return select_primary(collect_code_segments(text))


def extract(text: str) -> ExtractionResult:
    """Renderable document and primary block of ``text`` in one pass."""
    segments = collect_code_segments(text)
    primary = select_primary(segments)
    return ExtractionResult(
        primary_language=primary.language if primary else None,
        primary_code_raw=primary.code if primary else None,
        renderable_document=select_renderable(segments),
    )
