"""Frame-by-frame storyboard helpers for video mode."""

import html
import re

from refinementengine.models.errors import UserInputError

FRAME_COUNT = 3

_BLANK_LINE = re.compile(r"\n\s*\n")

STORYBOARD_INTRO = (
    f"A frame-by-frame visual story was created from your {FRAME_COUNT} descriptions. "
    "Open the preview below to view it."
)

_FRAME_TEMPLATE = """
                <div class="w-full md:w-1/3 flex flex-col items-center p-4 bg-gray-800 rounded-xl shadow-2xl border-2 border-red-700">
                    <h2 class="text-xl font-semibold text-gray-100 mb-3">FRAME {number}</h2>
                    <div class="aspect-video w-full rounded-lg overflow-hidden shadow-xl border border-gray-700">
                        <img src="{url}" alt="Story frame {number}" class="w-full h-full object-cover">
                    </div>
                    <p class="mt-4 text-sm text-gray-300 italic text-center">{caption}</p>
                </div>"""

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Video Frame Sequence</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <style>
        :root {{ font-family: 'Inter', sans-serif; }}
    </style>
</head>
<body class="bg-gray-900 min-h-screen p-4 flex items-center justify-center">
    <div class="w-full max-w-7xl mx-auto">
        <h1 class="text-3xl font-bold text-center text-red-500 mb-8 border-b-2 border-red-700 pb-2">Story Flow (Frame-by-Frame Simulation)</h1>
        <div class="flex flex-col md:flex-row gap-6">{frames}
        </div>
        <p class="text-center text-sm text-gray-500 mt-8">The images in this sequence were generated one after another to simulate a video.</p>
    </div>
</body>
</html>"""


def split_frame_descriptions(text: str) -> list[str]:
    """
    Split user text into frame descriptions separated by blank lines.

    Raises:
        UserInputError: Unless exactly three non-empty descriptions are found
    """
    parts = [part.strip() for part in _BLANK_LINE.split(text or "")]
    parts = [part for part in parts if part]
    validate_frame_descriptions(parts)
    return parts


def validate_frame_descriptions(segments: list[str]) -> None:
    non_empty = [segment for segment in segments if segment and segment.strip()]
    if len(segments) != FRAME_COUNT or len(non_empty) != FRAME_COUNT:
        raise UserInputError(
            f"Video mode needs exactly {FRAME_COUNT} frame descriptions separated by blank lines "
            "(one description per frame, with an empty line between them)."
        )


def build_storyboard_document(image_urls: list[str], captions: list[str]) -> str:
    """Complete HTML document showing each frame with its caption, in order."""
    if len(image_urls) != len(captions):
        raise ValueError("image_urls and captions must have the same length")

    frames = "".join(
        _FRAME_TEMPLATE.format(
            number=index + 1,
            url=html.escape(url, quote=True),
            caption=html.escape(caption),
        )
        for index, (url, caption) in enumerate(zip(image_urls, captions))
    )
    return _DOCUMENT_TEMPLATE.format(frames=frames)


def compose_storyboard(image_urls: list[str], captions: list[str]) -> str:
    """Chat message wrapping the storyboard document in an ``html`` fence."""
    document = build_storyboard_document(image_urls, captions)
    return f"{STORYBOARD_INTRO}\n\n```html\n{document}\n```"
