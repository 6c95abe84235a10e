"""Greedy word wrap using an average character width.

Annotation boxes use one fixed font and size, so a per-character estimate is
close enough and keeps layout independent of any font backend.
"""

DEFAULT_CHAR_WIDTH = 7.0


class TextWrapper:
    def __init__(self, average_char_width: float = DEFAULT_CHAR_WIDTH) -> None:
        self.average_char_width = average_char_width

    def estimated_width(self, s: str) -> float:
        return len(s) * self.average_char_width

    def wrap(self, text: str | None, max_width: float) -> list[str]:
        """Split text into lines no wider than max_width.

        A word that is wider than max_width on its own gets a line to itself.
        """
        if not text:
            return []

        lines: list[str] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}" if current else word
            if self.estimated_width(candidate) <= max_width:
                current = candidate
            elif current:
                lines.append(current)
                current = word
            else:
                lines.append(word)

        if current:
            lines.append(current)
        return lines
