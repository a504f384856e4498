import re

# Opening fence with optional language tag, or a bare closing fence
_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def sanitize(text: str) -> str:
    """Strip markdown code-fence markers from a completion reply and trim it."""
    return _FENCE.sub("", text).strip()
