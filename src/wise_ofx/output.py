"""Output utilities for serializing OFX event streams."""

from __future__ import annotations

import contextlib
import re
import sys
from typing import IO, TYPE_CHECKING
from xml.sax.saxutils import XMLGenerator

from wise_ofx.errors import OutputError, SerializationError
from wise_ofx.models import Declaration, EndElement, ProcessingInstruction, StartElement, Text

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from wise_ofx.models import XmlEvent

ENCODING = 'utf-8'

# Characters outside the XML 1.0 Char production, lone surrogates included.
INVALID_XML_CHARS = re.compile(r'[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')


def _write_event(generator: XMLGenerator, event: XmlEvent, open_elements: list[str]) -> None:
    if isinstance(event, Declaration):
        generator.startDocument()
    elif isinstance(event, ProcessingInstruction):
        generator.processingInstruction(event.target, event.data)
    elif isinstance(event, StartElement):
        generator.startElement(event.name, {})
        open_elements.append(event.name)
    elif isinstance(event, Text):
        invalid = INVALID_XML_CHARS.search(event.value)
        if invalid is not None:
            parent = open_elements[-1] if open_elements else 'document'
            raise SerializationError(f'invalid XML character {invalid.group()!r} in {parent} text: {event.value!r}')
        generator.characters(event.value)
    elif isinstance(event, EndElement):
        if not open_elements or open_elements[-1] != event.name:
            expected = open_elements[-1] if open_elements else 'nothing'
            raise SerializationError(f'unexpected </{event.name}> while {expected} is open')
        open_elements.pop()
        generator.endElement(event.name)
    else:
        raise SerializationError(f'unsupported XML event: {event!r}')


def write_events(events: Iterable[XmlEvent], sink: IO[bytes]) -> int:
    """Serialize ``events`` as UTF-8 XML into ``sink``; return the number of events written.

    Text is escaped (``&``, ``<``, ``>``) and every element gets an explicit
    end tag. Mis-nested or unclosed elements and text holding characters XML
    cannot represent raise ``SerializationError``.
    """

    generator = XMLGenerator(sink, encoding=ENCODING, short_empty_elements=False)
    open_elements: list[str] = []
    count = 0
    try:
        for event in events:
            _write_event(generator, event, open_elements)
            count += 1
        generator.endDocument()
    except OSError as exc:
        raise OutputError(f'Failed to write OFX output: {exc}') from exc
    except (ValueError, TypeError) as exc:
        raise SerializationError(f'Failed to serialize OFX output: {exc}') from exc
    if open_elements:
        raise SerializationError(f'unclosed elements at end of document: {", ".join(open_elements)}')
    return count


@contextlib.contextmanager
def open_output(path: Path | None) -> Iterator[IO[bytes]]:
    """Yield a binary sink for ``path``, or standard output when ``path`` is ``None``."""

    if path is None:
        stdout = sys.stdout
        stdout.flush()
        yield stdout.buffer
        stdout.buffer.flush()
        return

    try:
        handle = path.open('wb')
    except OSError as exc:
        raise OutputError(f'Failed to create output file {path}: {exc}') from exc
    with handle:
        yield handle
