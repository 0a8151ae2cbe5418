#Bradford Arrington 2025
import sys
from io import BytesIO
from typing import BinaryIO


class CompressorBitio:
    PACIFIER_COUNT = 2047

    class BitFile:
        """MSB-first bit stream over a binary file object.

        Output mode packs bits into ``rack`` under ``mask`` and writes each
        byte once eight bits have accumulated; ``close_bit_file`` (or
        ``flush``) writes a final partial byte with the unused low bits zero.
        Input mode hands bits back in the same order.
        """

        def __init__(self, stream: BinaryIO, input_mode: bool, pacifier: bool = False):
            self.is_input = input_mode
            self.file_stream: BinaryIO = stream
            self.rack: int = 0
            self.mask: int = 0x80
            self.pacifier = pacifier
            self.pacifier_counter: int = 0

        @staticmethod
        def open_output_bit_file(name: str, pacifier: bool = False) -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(open(name, "wb"), False, pacifier)

        @staticmethod
        def open_input_bit_file(name: str, pacifier: bool = False) -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(open(name, "rb"), True, pacifier)

        @staticmethod
        def from_bytes(data: bytes) -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(BytesIO(data), True)

        @staticmethod
        def to_bytes() -> 'CompressorBitio.BitFile':
            return CompressorBitio.BitFile(BytesIO(), False)

        def getvalue(self) -> bytes:
            self.flush()
            return self.file_stream.getvalue()

        def _count_byte(self):
            self.pacifier_counter += 1
            if self.pacifier and (self.pacifier_counter & CompressorBitio.PACIFIER_COUNT) == 0:
                sys.stdout.write(".")
                sys.stdout.flush()

        def _write_rack(self):
            self.file_stream.write(bytes([self.rack]))
            self._count_byte()
            self.rack = 0
            self.mask = 0x80

        def flush(self):
            # Partial byte goes out once, left-aligned, padding bits zero.
            if not self.is_input and self.mask != 0x80:
                self._write_rack()

        def close_bit_file(self):
            self.flush()
            self.file_stream.close()

        def output_bit(self, bit: int):
            if bit != 0:
                self.rack |= self.mask
            self.mask >>= 1
            if self.mask == 0:
                self._write_rack()

        def output_bits(self, code: int, count: int):
            mask_code: int = 1 << (count - 1) if count > 0 else 0
            while mask_code != 0:
                if (mask_code & code) != 0:
                    self.rack |= self.mask
                self.mask >>= 1
                if self.mask == 0:
                    self._write_rack()
                mask_code >>= 1

        def output_code(self, bits: str):
            for bit in bits:
                self.output_bit(1 if bit == "1" else 0)

        def input_bit(self) -> int:
            if self.mask == 0x80:
                read = self.file_stream.read(1)
                if not read:
                    raise EOFError("End of bit stream reached.")
                self.rack = read[0]
                self._count_byte()
            value = self.rack & self.mask
            self.mask >>= 1
            if self.mask == 0:
                self.mask = 0x80
            return 1 if value != 0 else 0
