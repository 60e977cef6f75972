# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/crypto/der.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Minimal read-only DER walker for PKCS#7 SignedData structures

"""
DER Reader: walks tag/length/value structures without copying the buffer.

Only definite-length, single-byte-tag encodings are accepted, which is all
that DER (and therefore Authenticode) produces. Anything else raises DerError.
"""

from typing import List, NamedTuple, Optional

TAG_INTEGER = 0x02
TAG_OCTET_STRING = 0x04
TAG_OID = 0x06
TAG_SEQUENCE = 0x30
TAG_SET = 0x31
TAG_CONTEXT_0 = 0xA0
TAG_CONTEXT_1 = 0xA1


class DerError(ValueError):
    """Raised when a buffer is not well-formed DER"""
    pass


class DerNode(NamedTuple):
    """One TLV element inside a shared buffer."""
    tag: int
    start: int
    content_start: int
    end: int
    buf: bytes

    @property
    def content(self) -> bytes:
        return self.buf[self.content_start:self.end]

    @property
    def encoded(self) -> bytes:
        return self.buf[self.start:self.end]


def parse(buf: bytes, offset: int = 0, limit: Optional[int] = None) -> DerNode:
    """
    Parse the TLV element starting at offset.

    Args:
        buf: Buffer holding the encoding
        offset: Offset of the tag byte
        limit: Offset the element must not extend past (default: end of buffer)

    Returns:
        DerNode

    Raises:
        DerError: On truncated, indefinite-length or multi-byte-tag encodings
    """
    if limit is None:
        limit = len(buf)

    if offset + 2 > limit:
        raise DerError(f"Truncated element at offset {offset}")

    tag = buf[offset]
    if tag & 0x1F == 0x1F:
        raise DerError(f"Multi-byte tags are not supported (offset {offset})")

    first = buf[offset + 1]
    if first < 0x80:
        length = first
        content_start = offset + 2
    elif first == 0x80:
        raise DerError(f"Indefinite length is not DER (offset {offset})")
    else:
        count = first & 0x7F
        if count > 4 or offset + 2 + count > limit:
            raise DerError(f"Bad length encoding at offset {offset}")
        length = int.from_bytes(buf[offset + 2:offset + 2 + count], 'big')
        content_start = offset + 2 + count

    end = content_start + length
    if end > limit:
        raise DerError(f"Element at offset {offset} overruns its container")

    return DerNode(tag, offset, content_start, end, buf)


def children(node: DerNode) -> List[DerNode]:
    """Parse the elements contained in a constructed node."""
    if not node.tag & 0x20:
        raise DerError(f"Element with tag 0x{node.tag:02x} is not constructed")

    items = []
    offset = node.content_start
    while offset < node.end:
        child = parse(node.buf, offset, node.end)
        items.append(child)
        offset = child.end
    return items


def expect(node: DerNode, tag: int) -> DerNode:
    """Return node if it carries tag, else raise DerError."""
    if node.tag != tag:
        raise DerError(f"Expected tag 0x{tag:02x}, found 0x{node.tag:02x} at offset {node.start}")
    return node


def decode_oid(content: bytes) -> str:
    """Decode OBJECT IDENTIFIER content octets to dotted form."""
    if not content or content[-1] & 0x80:
        raise DerError("Malformed object identifier")

    values = []
    value = 0
    for byte in content:
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            values.append(value)
            value = 0

    first = values[0]
    if first < 80:
        head = [first // 40, first % 40]
    else:
        head = [2, first - 80]
    return ".".join(str(v) for v in head + values[1:])


def decode_integer(content: bytes) -> int:
    """Decode INTEGER content octets (two's complement, big-endian)."""
    if not content:
        raise DerError("Empty integer")
    return int.from_bytes(content, 'big', signed=True)
