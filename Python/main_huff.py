# Bradford Arrington 2025
import os
import sys
import time
import tracemalloc
from typing import List, Optional

import psutil

from bitio import CompressorBitio
from huff import (COMPRESSION_NAME, USAGE, HuffmanError, compress_file,
                  expand_file, write_code_table)

MODES = ("-encode", "-decode", "-codetable")

_printed_header = False


def file_size(file_name: str) -> int:
    try:
        file_info = os.stat(file_name)
        return file_info.st_size
    except FileNotFoundError:
        return 0


def print_ratios(input_file_path: str, output_file_path: str):
    input_size = file_size(input_file_path)
    if input_size == 0:
        input_size = 1

    output_size = file_size(output_file_path)
    ratio = 100 - int((output_size * 100) / input_size)

    print(f"\nInput bytes:             {input_size}")
    print(f"Output bytes:            {output_size}")
    print(f"Compression ratio:       {ratio}%")


def track_performance(name, func, *args, **kwargs):
    global _printed_header

    process = psutil.Process(os.getpid())
    start_time = time.time()
    start_cpu = process.cpu_times().user
    tracemalloc.start()
    start_mem = tracemalloc.get_traced_memory()[0]

    try:
        result = func(*args, **kwargs)
        end_mem = tracemalloc.get_traced_memory()[1]
    finally:
        tracemalloc.stop()
    end_cpu = process.cpu_times().user
    end_time = time.time()

    wall_time_ms = (end_time - start_time) * 1000
    cpu_time_ms = (end_cpu - start_cpu) * 1000
    mem_used_kb = (end_mem - start_mem) / 1024

    if not _printed_header:
        print(f"{'Function':<20} {'Wall Time (ms)':>15} {'CPU Time (ms)':>15} {'Memory Used (KB)':>20}")
        _printed_header = True

    print(f"{name:<20} {wall_time_ms:15.2f} {cpu_time_ms:15.2f} {mem_used_kb:20.2f}")

    return result


def short_program_name(prog_name: str) -> str:
    short_name = prog_name
    last_slash = max(prog_name.rfind('\\'), prog_name.rfind('/'), prog_name.rfind(':'))
    if last_slash != -1:
        short_name = prog_name[last_slash + 1:]
    extension = short_name.rfind('.')
    if extension != -1:
        short_name = short_name[:extension]
    return short_name


def main(argv: Optional[List[str]] = None) -> int:
    arguments = sys.argv if argv is None else argv
    if len(arguments) < 3:
        print(f"\nUsage:  {short_program_name(arguments[0] if arguments else 'huff')} {USAGE}")
        return 0

    mode = "-encode"
    remaining_args = []
    for arg in arguments[3:]:
        if arg in MODES:
            mode = arg
        else:
            remaining_args.append(arg)

    try:
        if mode == "-decode":
            print(f"\nDecompressing {arguments[1]} to {arguments[2]}")
            print(f"Using {COMPRESSION_NAME}\n")
            input_bit_file = CompressorBitio.BitFile.open_input_bit_file(arguments[1], True)
            try:
                with open(arguments[2], 'wb') as output_file:
                    track_performance("ExpandFile", expand_file, input_bit_file, output_file, remaining_args)
            finally:
                input_bit_file.close_bit_file()
        else:
            with open(arguments[1], 'rb') as input_file:
                if mode == "-codetable":
                    with open(arguments[2], 'wb') as output_file:
                        track_performance("WriteCodeTable", write_code_table, input_file, output_file,
                                          remaining_args)
                    print(f"\nCode table for {arguments[1]} written to {arguments[2]}")
                else:
                    output = track_performance("OpenBitFile", CompressorBitio.BitFile.open_output_bit_file,
                                               arguments[2], True)
                    try:
                        track_performance("CompressFile", compress_file, input_file, output, remaining_args)
                    finally:
                        track_performance("CloseBitFile", output.close_bit_file)
                    print(f"\nCompressing {arguments[1]} to {arguments[2]}")
                    print(f"Using {COMPRESSION_NAME}\n")
                    print_ratios(arguments[1], arguments[2])
    except FileNotFoundError as e:
        if e.filename == arguments[1]:
            print(f"Error: Input file '{arguments[1]}' not found.")
        else:
            print(f"Error: Cannot create output file '{arguments[2]}'.")
        return 1
    except (HuffmanError, OSError) as e:
        print(f"An error occurred: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
