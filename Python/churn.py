import os
import sys
from datetime import datetime
from pathlib import Path

import huff


class ChurnProgram:
    COMPRESSED_EXTENSIONS = {".zip", ".ice", ".lzh", ".arc", ".gif", ".pak", ".arj"}

    def __init__(self, log_name="CHURN.LOG"):
        self.total_files = 0
        self.total_passed = 0
        self.total_failed = 0
        self.log_name = log_name
        self.log_file = None

    def main(self, args):
        if len(args) != 1:
            self.print_usage()
            return 1

        root_dir = os.path.normpath(args[0]) + os.sep

        with open(self.log_name, "w", encoding="utf-8") as self.log_file:
            self.write_log_header()

            start_time = datetime.now()
            self.churn_files(root_dir)
            stop_time = datetime.now()

            self.write_log_summary(start_time, stop_time)

        return 0 if self.total_failed == 0 else 2

    def churn_files(self, path):
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except PermissionError as ex:
            print(f"Access denied to {path}: {ex}", file=sys.stderr)
            return

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                self.churn_files(entry.path)
            elif entry.is_file(follow_symlinks=False):
                if not self.file_is_already_compressed(entry.path):
                    print(f"Testing {entry.path}", file=sys.stderr)
                    if not self.compress(entry.path):
                        print("Comparison failed!", file=sys.stderr)

    def file_is_already_compressed(self, name):
        return Path(name).suffix.lower() in self.COMPRESSED_EXTENSIONS

    def compress(self, file_name):
        self.log_file.write(f"{file_name:<40} ")
        self.total_files += 1
        try:
            with open(file_name, "rb") as f:
                original = f.read()

            packed = huff.encode(original)
            expanded = huff.decode(packed)
        except (huff.HuffmanError, OSError) as ex:
            self.total_failed += 1
            self.log_file.write(f"Failed: {ex}\n")
            return False

        old_size = len(original)
        new_size = len(packed)
        self.log_file.write(f" {old_size:8} {new_size:8} ")

        if old_size == 0:
            old_size = 1

        ratio = 100 - (new_size * 100 // old_size)
        self.log_file.write(f"{ratio:4}%  ")

        if expanded != original:
            self.log_file.write("Failed\n")
            self.total_failed += 1
            return False

        self.log_file.write("Passed\n")
        self.total_passed += 1
        return True

    def write_log_header(self):
        self.log_file.write("                                          Original   Packed\n")
        self.log_file.write("            File Name                     Size      Size   Ratio  Result\n")
        self.log_file.write("-------------------------------------     --------  --------  ----  ------\n")

    def write_log_summary(self, start_time, stop_time):
        elapsed_time = (stop_time - start_time).total_seconds()
        self.log_file.write(f"\nTotal elapsed time: {elapsed_time:.2f} seconds\n")
        self.log_file.write(f"Total files:   {self.total_files}\n")
        self.log_file.write(f"Total passed:  {self.total_passed}\n")
        self.log_file.write(f"Total failed:  {self.total_failed}\n")

    def print_usage(self):
        usage = """
CHURN 1.0. Usage: CHURN root-dir

CHURN tests the Huffman codec by encoding and decoding every file below a directory.

Example:
  CHURN C:\\DATA
"""
        print(usage)


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    return ChurnProgram().main(args)


if __name__ == "__main__":
    sys.exit(main())
