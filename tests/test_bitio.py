from io import BytesIO

import pytest

from bitio import CompressorBitio


def test_output_bits_msb_first():
    bit_file = CompressorBitio.BitFile.to_bytes()
    bit_file.output_bits(0b10110001, 8)
    assert bit_file.getvalue() == b"\xb1"


def test_partial_byte_is_left_aligned_and_zero_padded():
    bit_file = CompressorBitio.BitFile.to_bytes()
    bit_file.output_bits(0b101, 3)
    assert bit_file.getvalue() == b"\xa0"


def test_no_padding_byte_on_exact_boundary():
    bit_file = CompressorBitio.BitFile.to_bytes()
    for _ in range(16):
        bit_file.output_bit(1)
    assert bit_file.getvalue() == b"\xff\xff"


def test_output_code_string():
    bit_file = CompressorBitio.BitFile.to_bytes()
    bit_file.output_code("0100000101")
    assert bit_file.getvalue() == b"\x41\x40"


def test_zero_bit_count_writes_nothing():
    bit_file = CompressorBitio.BitFile.to_bytes()
    bit_file.output_bits(0xFF, 0)
    assert bit_file.getvalue() == b""


def test_input_bit_reads_back_in_order():
    bit_file = CompressorBitio.BitFile.from_bytes(b"\xa5")
    bits = [bit_file.input_bit() for _ in range(8)]
    assert bits == [1, 0, 1, 0, 0, 1, 0, 1]


def test_input_bit_past_end_raises_eof():
    bit_file = CompressorBitio.BitFile.from_bytes(b"\x00")
    for _ in range(8):
        bit_file.input_bit()
    with pytest.raises(EOFError):
        bit_file.input_bit()


def test_close_bit_file_flushes_partial_byte(tmp_path):
    path = tmp_path / "bits.bin"
    bit_file = CompressorBitio.BitFile.open_output_bit_file(str(path))
    bit_file.output_bits(0b11, 2)
    bit_file.close_bit_file()
    assert path.read_bytes() == b"\xc0"


def test_pacifier_prints_dot_every_2048_bytes(capsys):
    bit_file = CompressorBitio.BitFile(BytesIO(), False, pacifier=True)
    for _ in range(2048):
        bit_file.output_bits(0, 8)
    assert capsys.readouterr().out == "."


def test_pacifier_off_by_default(capsys):
    bit_file = CompressorBitio.BitFile.to_bytes()
    for _ in range(4096):
        bit_file.output_bits(0, 8)
    assert capsys.readouterr().out == ""
