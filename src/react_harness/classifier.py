# classifier.py
# Incremental ReAct segmenter.
#
# Turns a lazily delivered stream of text fragments (arbitrary boundaries,
# possibly splitting a marker or a UTF-8 character) into typed segments.
# Concatenating every emitted segment's text reproduces the input with the
# marker literals removed, in order, regardless of how the input was chunked.
#
# Memory is bounded by one fragment plus a fixed margin: when no marker is
# visible, everything except the last `margin` characters is emitted, so a
# marker split across fragments is still found once its tail arrives.

import codecs
from collections.abc import Iterable, Iterator

from react_harness.models import Segment, SegmentKind
from react_harness.prompt import CHINESE, Protocol


class ReactClassifier:
    """
    Stateless factory for classification passes.

    Example:
        for segment in ReactClassifier(ENGLISH).classify(fragments):
            print(segment.kind, segment.text)
    """

    def __init__(self, protocol: Protocol = CHINESE) -> None:
        self._markers = protocol.markers()
        self._margin = max(len(literal) for literal, _ in self._markers)

    @property
    def margin(self) -> int:
        return self._margin

    def _find_marker(self, buffer: str) -> tuple[int, str, SegmentKind] | None:
        """Earliest marker occurrence; ties go to the higher-priority marker."""
        best: tuple[int, str, SegmentKind] | None = None
        for literal, kind in self._markers:
            offset = buffer.find(literal)
            if offset != -1 and (best is None or offset < best[0]):
                best = (offset, literal, kind)
        return best

    def classify(self, fragments: Iterable[str | bytes]) -> Iterator[Segment]:
        """
        Lazily classify `fragments`. Single pass, single consumption.

        Closing the returned iterator closes the source iterator as well,
        which releases whatever transport is producing the fragments.
        """
        source = iter(fragments)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        kind = SegmentKind.THINKING
        buffer = ""

        try:
            for fragment in source:
                if isinstance(fragment, bytes):
                    fragment = decoder.decode(fragment)
                buffer += fragment

                while True:
                    hit = self._find_marker(buffer)
                    if hit is None:
                        cut = len(buffer) - self._margin
                        if cut > 0:
                            yield Segment(kind=kind, text=buffer[:cut])
                            buffer = buffer[cut:]
                        break

                    offset, literal, next_kind = hit
                    if offset > 0:
                        yield Segment(kind=kind, text=buffer[:offset])
                    kind = next_kind
                    buffer = buffer[offset + len(literal):]

            buffer += decoder.decode(b"", final=True)
            if buffer:
                yield Segment(kind=kind, text=buffer)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                close()


def classify(fragments: Iterable[str | bytes], protocol: Protocol = CHINESE) -> Iterator[Segment]:
    return ReactClassifier(protocol).classify(fragments)
