"""Embeds the source document in exported artifacts and recovers it again.

Each embedding keeps the artifact valid for its own readers:

- DOT: a block of `//` line comments ahead of the graph.
- SVG: an XML comment just before the closing `</svg>` tag.
- PNG: trailing bytes after the `IEND` chunk, which decoders ignore.
"""

import re
import struct
from typing import Optional

DOT_BEGIN = '// deciduous-source-begin'
DOT_END = '// deciduous-source-end'
# Differs from the marker prefix, so no body line can equal a marker.
DOT_PREFIX = '//| '

SVG_BEGIN = '<!-- deciduous-source\n'
SVG_END = '\n-->'

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'
PNG_MARKER = b'\n#deciduous-source\n'

_SVG_UNESCAPE = re.compile(r'\\(?:x([0-9a-f]{2})|(.))', re.DOTALL)
# Characters XML does not allow (or normalizes) inside a comment.
_SVG_CONTROL = frozenset(chr(code) for code in range(0x20) if chr(code) not in '\t\n')


def embed_in_graph_text(dot: str, source: str) -> str:
    """Prefix DOT text with the source as line comments."""
    lines = [DOT_BEGIN]
    lines.extend(DOT_PREFIX + line for line in source.split('\n'))
    lines.append(DOT_END)
    return '\n'.join(lines) + '\n' + dot


def extract_from_graph_text(dot: str) -> Optional[str]:
    lines = dot.split('\n')
    try:
        start = lines.index(DOT_BEGIN)
        end = lines.index(DOT_END, start + 1)
    except ValueError:
        return None
    body = lines[start + 1:end]
    if not all(line.startswith(DOT_PREFIX) for line in body):
        return None
    return '\n'.join(line[len(DOT_PREFIX):] for line in body)


def _escape_comment(text: str) -> str:
    # XML comments may not contain "--"; a dash after a dash is escaped.
    out = []
    previous = ''
    for ch in text:
        if ch == '\\':
            out.append('\\\\')
        elif ch in _SVG_CONTROL:
            out.append(f'\\x{ord(ch):02x}')
        elif ch == '-' and previous == '-':
            out.append('\\-')
        else:
            out.append(ch)
        previous = ch
    return ''.join(out)


def _unescape_comment(text: str) -> str:
    def replace(match: re.Match) -> str:
        if match.group(1) is not None:
            return chr(int(match.group(1), 16))
        return match.group(2)

    return _SVG_UNESCAPE.sub(replace, text)


def embed_in_vector_image(svg: str, source: str) -> str:
    """Insert the source as a comment inside the SVG root element."""
    comment = SVG_BEGIN + _escape_comment(source) + SVG_END + '\n'
    index = svg.rfind('</svg>')
    if index == -1:
        return svg + comment
    return svg[:index] + comment + svg[index:]


def extract_from_vector_image(svg: str) -> Optional[str]:
    start = svg.rfind(SVG_BEGIN)
    if start == -1:
        return None
    start += len(SVG_BEGIN)
    end = svg.find(SVG_END, start)
    if end == -1:
        return None
    return _unescape_comment(svg[start:end])


def _png_end(data: bytes) -> int:
    """Offset just past the IEND chunk, or len(data) if it cannot be found."""
    if not data.startswith(PNG_SIGNATURE):
        return len(data)
    offset = len(PNG_SIGNATURE)
    while offset + 8 <= len(data):
        (length,) = struct.unpack('>I', data[offset:offset + 4])
        chunk_type = data[offset + 4:offset + 8]
        offset += 12 + length
        if chunk_type == b'IEND':
            return min(offset, len(data))
    return len(data)


def append_to_raster_image(png: bytes, source: str) -> bytes:
    """Place the source after the PNG end-of-image chunk.

    The trailer is the marker, a big-endian length and the UTF-8 source, so
    it stays recoverable even when other bytes already follow IEND.
    """
    end = _png_end(png)
    encoded = source.encode('utf-8')
    trailer = PNG_MARKER + struct.pack('>I', len(encoded)) + encoded
    return png[:end] + trailer + png[end:]


def extract_from_raster_image(png: bytes) -> Optional[str]:
    end = _png_end(png)
    trailer = png[end:]
    if not trailer.startswith(PNG_MARKER):
        return None
    start = len(PNG_MARKER) + 4
    if len(trailer) < start:
        return None
    (length,) = struct.unpack('>I', trailer[len(PNG_MARKER):start])
    return trailer[start:start + length].decode('utf-8')


def strip_raster_trailer(png: bytes) -> bytes:
    """The image bytes without anything after the IEND chunk."""
    return png[:_png_end(png)]


def extract_source(data: bytes) -> Optional[str]:
    """Recover an embedded source from any supported artifact."""
    if data.startswith(PNG_SIGNATURE):
        return extract_from_raster_image(data)
    text = data.decode('utf-8', errors='replace')
    if '<svg' in text:
        return extract_from_vector_image(text)
    return extract_from_graph_text(text)
