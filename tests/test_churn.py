from churn import ChurnProgram


def make_tree(root):
    (root / "sub").mkdir()
    (root / "a.txt").write_bytes(b"hello churn " * 30)
    (root / "empty.bin").write_bytes(b"")
    (root / "sub" / "b.bin").write_bytes(bytes(range(256)))
    (root / "skip.zip").write_bytes(b"PK\x03\x04")


def test_churn_passes_every_file(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    make_tree(data_dir)
    log = tmp_path / "CHURN.LOG"

    program = ChurnProgram(log_name=str(log))
    assert program.main([str(data_dir)]) == 0

    assert program.total_files == 3
    assert program.total_passed == 3
    assert program.total_failed == 0

    text = log.read_text(encoding="utf-8")
    assert "Total files:   3" in text
    assert "Total failed:  0" in text
    assert text.count("Passed") == 3
    assert "skip.zip" not in text


def test_churn_skips_compressed_extensions():
    program = ChurnProgram()
    assert program.file_is_already_compressed("archive.ZIP")
    assert program.file_is_already_compressed("pic.gif")
    assert not program.file_is_already_compressed("notes.txt")


def test_churn_usage(capsys):
    assert ChurnProgram().main([]) == 1
    assert "Usage: CHURN root-dir" in capsys.readouterr().out
