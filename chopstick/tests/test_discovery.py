import contextlib
import os

import pytest

from chopstick.core.discovery import discover_parts
from chopstick.core.errors import IncompleteParts, NoParts, NotRecognised
from chopstick.core.naming import name_for

FILE_NAME = "stick_me"


def make_parts(directory, ordinals, width=2, name=FILE_NAME):
    paths = []
    for ordinal in ordinals:
        path = name_for(os.path.join(directory, name), ordinal, width)
        with open(path, "wb") as f:
            f.write(bytes([ordinal]) * 3)
        paths.append(path)
    return paths


def test_discovers_complete_set_from_bare_name(tmp_path):
    parts = make_parts(tmp_path, range(1, 11))
    found = discover_parts(os.path.join(tmp_path, FILE_NAME))
    assert found.original == os.path.join(tmp_path, FILE_NAME)
    assert found.parts == parts


def test_discovers_from_any_part(tmp_path):
    parts = make_parts(tmp_path, range(1, 4), width=1)
    found = discover_parts(parts[1])
    assert found.original == os.path.join(tmp_path, FILE_NAME)
    assert found.parts == parts


def test_missing_middle_part_rejected(tmp_path):
    make_parts(tmp_path, [1, 2, 3, 5, 6])
    with pytest.raises(IncompleteParts) as exc:
        discover_parts(os.path.join(tmp_path, FILE_NAME))
    assert exc.value.found == [f"{FILE_NAME}.p0{i}" for i in (1, 2, 3, 5, 6)]


def test_missing_first_part_rejected(tmp_path):
    make_parts(tmp_path, [2, 3, 4], width=1)
    with pytest.raises(IncompleteParts):
        discover_parts(os.path.join(tmp_path, FILE_NAME))


def test_duplicate_ordinal_rejected(tmp_path):
    make_parts(tmp_path, [1, 2], width=1)
    make_parts(tmp_path, [1], width=2)
    with pytest.raises(IncompleteParts):
        discover_parts(os.path.join(tmp_path, FILE_NAME))


def test_no_parts(tmp_path):
    (tmp_path / FILE_NAME).write_bytes(b"not a part")
    with pytest.raises(NoParts):
        discover_parts(os.path.join(tmp_path, FILE_NAME))


def test_unrelated_files_ignored(tmp_path):
    parts = make_parts(tmp_path, [1, 2, 3], width=1)
    for name in (f"{FILE_NAME}.p1.bak", f"other.p4", f"{FILE_NAME}p4", f"{FILE_NAME}.p4.tar", f"x{FILE_NAME}.p4"):
        (tmp_path / name).write_bytes(b"noise")
    (tmp_path / f"{FILE_NAME}.p4").mkdir()
    assert discover_parts(os.path.join(tmp_path, FILE_NAME)).parts == parts


def test_stem_with_extensions(tmp_path):
    parts = make_parts(tmp_path, [1, 2], width=1, name="archive.tar.gz")
    found = discover_parts(os.path.join(tmp_path, "archive.tar.gz.p2"))
    assert found.original == os.path.join(tmp_path, "archive.tar.gz")
    assert found.parts == parts


def test_uses_working_directory_without_parent(tmp_path, monkeypatch):
    make_parts(tmp_path, [1, 2], width=1)
    monkeypatch.chdir(tmp_path)
    found = discover_parts(FILE_NAME)
    assert found.original == os.path.join(os.getcwd(), FILE_NAME)
    assert len(found.parts) == 2


def test_directory_path_not_recognised(tmp_path):
    with pytest.raises(NotRecognised):
        discover_parts(str(tmp_path) + os.sep)


class UnreadableEntry:
    def __init__(self, directory, name):
        self.name = name
        self.path = os.path.join(directory, name)

    def is_file(self):
        raise PermissionError(f"Permission denied: {self.path!r}")


def add_unreadable_entry(monkeypatch, name):
    real_scandir = os.scandir

    @contextlib.contextmanager
    def scandir(path):
        with real_scandir(path) as it:
            yield list(it) + [UnreadableEntry(path, name)]

    monkeypatch.setattr(os, "scandir", scandir)


def test_unreadable_needed_part_is_skipped(tmp_path, monkeypatch, capsys):
    make_parts(tmp_path, [1, 3], width=1)
    add_unreadable_entry(monkeypatch, f"{FILE_NAME}.p2")
    with pytest.raises(IncompleteParts) as exc:
        discover_parts(os.path.join(tmp_path, FILE_NAME))
    assert exc.value.found == [f"{FILE_NAME}.p1", f"{FILE_NAME}.p3"]
    assert f"Failed to read {os.path.join(tmp_path, FILE_NAME)}.p2" in capsys.readouterr().out


def test_unreadable_extra_entry_only_warns(tmp_path, monkeypatch, capsys):
    parts = make_parts(tmp_path, [1, 2, 3], width=1)
    add_unreadable_entry(monkeypatch, f"{FILE_NAME}.p9")
    assert discover_parts(os.path.join(tmp_path, FILE_NAME)).parts == parts
    assert "Failed to read" in capsys.readouterr().out


def test_symlinked_part_accepted(tmp_path):
    parts = make_parts(tmp_path, [1, 3], width=1)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    target = elsewhere / "middle.bin"
    target.write_bytes(b"\x02" * 3)
    link = tmp_path / f"{FILE_NAME}.p2"
    try:
        os.symlink(target, link)
    except (OSError, NotImplementedError):
        pytest.skip("symbolic links unavailable")

    found = discover_parts(os.path.join(tmp_path, FILE_NAME))
    assert found.parts == [parts[0], str(link), parts[1]]


def test_dangling_symlink_is_not_a_part(tmp_path):
    make_parts(tmp_path, [1, 3], width=1)
    try:
        os.symlink(tmp_path / "gone", tmp_path / f"{FILE_NAME}.p2")
    except (OSError, NotImplementedError):
        pytest.skip("symbolic links unavailable")

    with pytest.raises(IncompleteParts):
        discover_parts(os.path.join(tmp_path, FILE_NAME))
