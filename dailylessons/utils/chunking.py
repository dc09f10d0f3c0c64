"""
Split long lesson texts into messages that fit the channel's length cap.
"""

TELEGRAM_MAX_MESSAGE_LENGTH = 4096


def chunk_text(text: str, max_length: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """
    Split text into ordered, non-empty segments of at most max_length characters.

    Cuts at the last newline inside the window, falling back to the last
    space, then to a hard cut at max_length. Whitespace around each cut is
    trimmed and whitespace-only segments are dropped.

    Args:
        text: Text to split
        max_length: Maximum segment length (must be positive)

    Returns:
        List of segments in reading order
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    chunks = []
    start = 0

    while start < len(text):
        if len(text) - start <= max_length:
            chunks.append(text[start:].strip())
            break

        window_end = start + max_length
        # a separator at window_end still leaves a segment of max_length
        split_index = text.rfind("\n", start + 1, window_end + 1)
        if split_index == -1:
            split_index = text.rfind(" ", start + 1, window_end + 1)
        if split_index == -1:
            chunks.append(text[start:window_end].strip())
            start = window_end
            continue

        chunks.append(text[start:split_index].strip())
        start = split_index + 1  # skip the separator

    return [chunk for chunk in chunks if chunk]
