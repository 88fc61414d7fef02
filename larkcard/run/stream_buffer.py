"""Stream buffer for assistant text accumulation.

Producers are inconsistent about what they stream: some send only the new
delta, others resend everything accumulated so far, and some resend a
shorter, stale copy. merge_stream_text() reconciles all three so the
accumulated text only ever grows.
"""

from dataclasses import dataclass


def merge_stream_text(previous: str, chunk: str) -> str:
    """Merge a streamed chunk into previously accumulated text.

    Args:
        previous: Text accumulated so far
        chunk: Newly received text

    Returns:
        The chunk if it extends the previous text, the previous text if the
        chunk is a stale prefix of it, otherwise both concatenated.
    """
    if not previous:
        return chunk
    if not chunk:
        return previous
    if chunk.startswith(previous):
        return chunk
    if previous.startswith(chunk):
        return previous
    return previous + chunk


@dataclass
class AssistantBuffer:
    """Running assistant text for one run.

    Attributes:
        text: Accumulated text
    """
    text: str = ""

    def merge(self, chunk: str) -> str:
        """Merge a chunk into the buffer and return the accumulated text."""
        self.text = merge_stream_text(self.text, chunk)
        return self.text

    def clear(self) -> None:
        self.text = ""
