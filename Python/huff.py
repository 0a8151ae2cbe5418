#Brad Arrington
import heapq
import struct
from collections import Counter
from typing import BinaryIO, Dict, List, Optional, Tuple

from bitio import CompressorBitio

SYMBOL_COUNT = 256
MAX_CODE_BITS = SYMBOL_COUNT - 1
MAX_PACKED_WIDTH = (MAX_CODE_BITS + 1 + 7) // 8
COMPRESSION_NAME = "static order 0 model with Huffman coding"
USAGE = "in-file out-file [-encode|-decode|-codetable] [-d]\n\nSpecifying -d will dump the modeling data\n"

# Header layout, little-endian:
#   uint32 symbol count
#   per symbol: uint8 symbol, uint8 packed width, <width> bytes packed code
#   uint64 total byte count
COUNT_FORMAT = "<I"
SYMBOL_FORMAT = "<BB"
TOTAL_FORMAT = "<Q"


class HuffmanError(Exception):
    pass


class IOUnavailable(HuffmanError, OSError):
    pass


class MalformedHeader(HuffmanError):
    pass


class IncompleteStream(HuffmanError):
    pass


class CorruptCode(HuffmanError):
    pass


class Node:
    def __init__(self, symbol: Optional[int] = None, weight: int = 0,
                 child_0: Optional['Node'] = None, child_1: Optional['Node'] = None):
        self.symbol = symbol
        self.weight = weight
        self.child_0 = child_0
        self.child_1 = child_1

    def is_leaf(self) -> bool:
        return self.child_0 is None and self.child_1 is None

    def __repr__(self):
        if self.is_leaf():
            return f"Node(symbol={self.symbol}, weight={self.weight})"
        return f"Node(weight={self.weight})"


def count_bytes(data: bytes) -> Tuple[Dict[int, int], int]:
    counts = Counter(data)
    return {symbol: counts[symbol] for symbol in sorted(counts)}, len(data)


def build_tree(frequencies: Dict[int, int]) -> Optional[Node]:
    """Greedy minimum-weight merge of one leaf per symbol.

    Heap entries are ``(weight, order, node)``. A leaf's order is its symbol
    value and internal nodes are numbered from SYMBOL_COUNT upward as they
    are created, so equal weights always resolve the same way and the nodes
    themselves are never compared. The first node popped becomes child_0.
    """
    heap = [(weight, symbol, Node(symbol, weight))
            for symbol, weight in frequencies.items() if weight > 0]
    if not heap:
        return None

    if len(heap) == 1:
        # One symbol still needs a one bit code, so pair it with an empty leaf.
        leaf = heap[0][2]
        return Node(None, leaf.weight, leaf, Node(None, 0))

    heapq.heapify(heap)
    next_free = SYMBOL_COUNT
    while len(heap) > 1:
        weight_0, _, child_0 = heapq.heappop(heap)
        weight_1, _, child_1 = heapq.heappop(heap)
        weight = weight_0 + weight_1
        heapq.heappush(heap, (weight, next_free, Node(None, weight, child_0, child_1)))
        next_free += 1

    return heap[0][2]


def analyze_and_build_tree(data: bytes) -> Tuple[Optional[Node], int]:
    frequencies, total = count_bytes(data)
    return build_tree(frequencies), total


def convert_tree_to_code(root: Optional[Node]) -> Dict[int, str]:
    codes: Dict[int, str] = {}
    if root is not None:
        _convert_node(root, "", codes)
    return codes


def _convert_node(node: Node, code_so_far: str, codes: Dict[int, str]):
    if node.is_leaf():
        if node.symbol is not None:
            codes[node.symbol] = code_so_far or "0"
        return

    _convert_node(node.child_0, code_so_far + "0", codes)
    _convert_node(node.child_1, code_so_far + "1", codes)


def pack_code(code: str) -> int:
    """Store a code as an integer with a 1 bit above its first bit."""
    if not code or len(code) > MAX_CODE_BITS or code.strip("01"):
        raise ValueError(f"Cannot pack Huffman code {code!r}")
    return (1 << len(code)) | int(code, 2)


def unpack_code(packed: int) -> str:
    if packed < 2:
        raise MalformedHeader(f"Packed code {packed} holds no bits")

    bits: List[str] = []
    while packed != 1:
        bits.append("1" if packed & 1 else "0")
        packed >>= 1
    bits.reverse()
    return "".join(bits)


def output_counts(codes: Dict[int, str], total: int) -> bytes:
    header = bytearray(struct.pack(COUNT_FORMAT, len(codes)))
    for symbol in sorted(codes):
        packed = pack_code(codes[symbol])
        width = (packed.bit_length() + 7) // 8
        header += struct.pack(SYMBOL_FORMAT, symbol, width)
        header += packed.to_bytes(width, "little")
    header += struct.pack(TOTAL_FORMAT, total)
    return bytes(header)


def _unpack_field(fmt: str, data: bytes, offset: int, what: str) -> Tuple[tuple, int]:
    size = struct.calcsize(fmt)
    if offset + size > len(data):
        raise MalformedHeader(f"Header truncated reading {what} at offset {offset}")
    return struct.unpack_from(fmt, data, offset), offset + size


def read_counts(data: bytes, offset: int = 0) -> Tuple[Dict[int, str], int, int]:
    """Parse a header starting at ``offset``.

    Returns the code table, the original byte count and the offset of the
    first payload byte.
    """
    (count,), offset = _unpack_field(COUNT_FORMAT, data, offset, "symbol count")
    if count > SYMBOL_COUNT:
        raise MalformedHeader(f"Header declares {count} symbols, at most {SYMBOL_COUNT} allowed")

    # Smallest possible entry is symbol, width and one packed byte.
    needed = count * (struct.calcsize(SYMBOL_FORMAT) + 1) + struct.calcsize(TOTAL_FORMAT)
    if len(data) - offset < needed:
        raise MalformedHeader(f"Header declares {count} symbols but only {len(data) - offset} bytes follow")

    codes: Dict[int, str] = {}
    for _ in range(count):
        (symbol, width), offset = _unpack_field(SYMBOL_FORMAT, data, offset, "symbol entry")
        if width == 0:
            raise MalformedHeader(f"Symbol {symbol} has an empty packed code")
        if width > MAX_PACKED_WIDTH:
            raise MalformedHeader(f"Symbol {symbol} has a {width} byte packed code, at most {MAX_PACKED_WIDTH} allowed")
        if offset + width > len(data):
            raise MalformedHeader(f"Header truncated reading code for symbol {symbol}")
        if symbol in codes:
            raise MalformedHeader(f"Symbol {symbol} appears twice in header")
        codes[symbol] = unpack_code(int.from_bytes(data[offset:offset + width], "little"))
        offset += width

    (total,), offset = _unpack_field(TOTAL_FORMAT, data, offset, "byte count")
    if not codes and total != 0:
        raise MalformedHeader(f"Header declares {total} bytes but no symbols")
    return codes, total, offset


def input_counts(data: bytes) -> Tuple[Dict[int, str], int]:
    codes, total, _ = read_counts(data)
    return codes, total


def rebuild_trie(codes: Dict[int, str]) -> Optional[Node]:
    """Grow a decode trie from a code table, rejecting tables that are not prefix-free."""
    if not codes:
        return None

    root = Node()
    for symbol in sorted(codes):
        node = root
        for bit in codes[symbol]:
            if node.symbol is not None:
                raise MalformedHeader(f"Code for symbol {node.symbol} is a prefix of the code for {symbol}")
            if bit == "1":
                if node.child_1 is None:
                    node.child_1 = Node()
                node = node.child_1
            else:
                if node.child_0 is None:
                    node.child_0 = Node()
                node = node.child_0
        if node.symbol is not None or not node.is_leaf():
            raise MalformedHeader(f"Code for symbol {symbol} collides with another code")
        node.symbol = symbol

    return root


def _read_all(stream: BinaryIO) -> bytes:
    try:
        return stream.read()
    except OSError as e:
        raise IOUnavailable(f"Cannot read input: {e}") from e


def _write_all(stream: BinaryIO, data: bytes):
    try:
        stream.write(data)
    except OSError as e:
        raise IOUnavailable(f"Cannot write output: {e}") from e


def _pack_data(data: bytes, output_bit_file: 'CompressorBitio.BitFile', codes: Dict[int, str]):
    missing = set(data).difference(codes)
    if missing:
        raise ValueError(f"No Huffman code for symbol {min(missing)}")

    table = {symbol: (int(code, 2), len(code)) for symbol, code in codes.items()}
    try:
        for c in data:
            code, code_bits = table[c]
            output_bit_file.output_bits(code, code_bits)
        output_bit_file.flush()
    except OSError as e:
        raise IOUnavailable(f"Cannot write output: {e}") from e


def compress_data(data: bytes, codes: Dict[int, str]) -> bytes:
    output_bit_file = CompressorBitio.BitFile.to_bytes()
    _pack_data(data, output_bit_file, codes)
    return output_bit_file.getvalue()


def _expand_bits(input_bit_file: 'CompressorBitio.BitFile', root: Optional[Node], total: int) -> bytes:
    if total == 0:
        return b""
    if root is None:
        raise MalformedHeader(f"Header declares {total} bytes but no symbols")

    output = bytearray()
    node = root
    try:
        while len(output) < total:
            if input_bit_file.input_bit():
                node = node.child_1
            else:
                node = node.child_0

            if node is None:
                raise CorruptCode(f"Invalid code in bit stream after {len(output)} bytes")
            if node.is_leaf():
                if node.symbol is None:
                    raise CorruptCode(f"Bit stream reached an empty leaf after {len(output)} bytes")
                output.append(node.symbol)
                node = root
    except EOFError as e:
        raise IncompleteStream(f"Bit stream ended after {len(output)} of {total} bytes") from e
    except OSError as e:
        raise IOUnavailable(f"Cannot read input: {e}") from e

    return bytes(output)


def expand_data(data: bytes, root: Optional[Node], total: int) -> bytes:
    return _expand_bits(CompressorBitio.BitFile.from_bytes(data), root, total)


def encode(data: bytes) -> bytes:
    root, total = analyze_and_build_tree(data)
    codes = convert_tree_to_code(root)
    return output_counts(codes, total) + compress_data(data, codes)


def decode(data: bytes) -> bytes:
    codes, total, offset = read_counts(data)
    root = rebuild_trie(codes)
    return expand_data(data[offset:], root, total)


def compress_file(input_file: BinaryIO, output_bit_file: 'CompressorBitio.BitFile', args: list):
    data = _read_all(input_file)
    root, total = analyze_and_build_tree(data)
    codes = convert_tree_to_code(root)
    _write_all(output_bit_file.file_stream, output_counts(codes, total))

    for arg in args:
        if arg == "-d":
            print_model(root, codes)
        else:
            print(f"Unused argument: {arg}")

    _pack_data(data, output_bit_file, codes)


def expand_file(input_bit_file: 'CompressorBitio.BitFile', output_file: BinaryIO, args: list):
    start = input_bit_file.file_stream.tell()
    data = _read_all(input_bit_file.file_stream)
    codes, total, offset = read_counts(data)
    root = rebuild_trie(codes)

    input_bit_file.file_stream.seek(start + offset)
    _write_all(output_file, _expand_bits(input_bit_file, root, total))

    for arg in args:
        if arg == "-d":
            print_code_table(codes)
        else:
            print(f"Unused argument: {arg}")


def write_code_table(input_file: BinaryIO, output_file: BinaryIO, args: list):
    root, total = analyze_and_build_tree(_read_all(input_file))
    codes = convert_tree_to_code(root)
    _write_all(output_file, output_counts(codes, total))

    for arg in args:
        if arg == "-d":
            print_code_table(codes)
        else:
            print(f"Unused argument: {arg}")


def print_char(c):
    if 0x20 <= c < 127:
        print(f"'{chr(c)}'", end="")
    else:
        print(f"{c:3d}", end="")


def print_model(root: Optional[Node], codes: Dict[int, str]):
    if root is None:
        print("Empty input, no model")
        return

    stack = [root]
    while stack:
        node = stack.pop()
        if not node.is_leaf():
            stack.append(node.child_1)
            stack.append(node.child_0)
        elif node.symbol is not None:
            print("node=", end="")
            print_char(node.symbol)
            print(f"  count={node.weight:3d}  Huffman code={codes[node.symbol]}")


def print_code_table(codes: Dict[int, str]):
    for symbol in sorted(codes):
        print_char(symbol)
        print(f" {codes[symbol]}")
