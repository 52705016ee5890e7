import os
from datetime import datetime

import pytest

from nfskit.inodes import FileInfo, Inodes, stat


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "b" / "f.txt").write_bytes(b"hello")
    (tmp_path / "top.txt").write_bytes(b"x")
    return tmp_path


def test_stat_of_file(tree):
    path = str(tree / "a" / "b" / "f.txt")
    fi = stat(path)
    st = os.lstat(path)
    assert fi.name == "f.txt"
    assert fi.inode() == st.st_ino
    assert fi.size() == 5
    assert fi.mode() == st.st_mode
    assert fi.num_links() == st.st_nlink
    assert not fi.is_dir()


def test_stat_times(tree):
    path = str(tree / "top.txt")
    fi = stat(path)
    st = os.lstat(path)
    assert isinstance(fi.mtime(), datetime)
    assert fi.mtime().timestamp() == pytest.approx(st.st_mtime, abs=1e-3)
    assert fi.atime().timestamp() == pytest.approx(st.st_atime, abs=1e-3)
    assert fi.ctime().timestamp() == pytest.approx(st.st_ctime, abs=1e-3)


def test_stat_of_directory(tree):
    fi = stat(str(tree / "a"))
    assert fi.is_dir()
    assert fi.name == "a"


def test_stat_does_not_follow_links(tree):
    link = tree / "link"
    os.symlink(str(tree / "top.txt"), str(link))
    fi = stat(str(link))
    assert fi.inode() == os.lstat(str(link)).st_ino
    assert fi.inode() != os.stat(str(link)).st_ino


def test_stat_missing_raises(tree):
    with pytest.raises(FileNotFoundError):
        stat(str(tree / "missing"))


def test_file_info_built_from_stat_result(tree):
    st = os.lstat(str(tree / "top.txt"))
    fi = FileInfo("custom", st)
    assert fi.name == "custom"
    assert fi.inode() == st.st_ino


def test_scan_records_every_entry(tree):
    inodes = Inodes()
    root = str(tree)
    inodes.scan(root)
    for path in (root, str(tree / "a"), str(tree / "a" / "b"),
                 str(tree / "a" / "b" / "f.txt"), str(tree / "top.txt")):
        ino = os.lstat(path).st_ino
        assert inodes.get_id(path) == ino
        assert inodes.get_path(ino) == path
        assert inodes.exist_path(path)


def test_scan_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Inodes().scan(str(tmp_path / "nope"))


def test_unknown_lookups():
    inodes = Inodes()
    assert inodes.get_path(12345) == ""
    assert inodes.get_id("/nowhere") == 0
    assert not inodes.exist_path("/nowhere")


def test_add_and_remove_by_id():
    inodes = Inodes()
    inodes.add(7, "/x/y")
    assert inodes.get_path(7) == "/x/y"
    assert inodes.get_id("/x/y") == 7
    inodes.remove_id(7)
    assert inodes.get_path(7) == ""
    assert not inodes.exist_path("/x/y")


def test_add_and_remove_by_path():
    inodes = Inodes()
    inodes.add(9, "/p")
    inodes.remove_path("/p")
    assert not inodes.exist_path("/p")
    assert inodes.get_path(9) == ""


def test_update_all_adds_new_parents(tree):
    inodes = Inodes()
    inodes.scan(str(tree))
    deep = tree / "n1" / "n2"
    deep.mkdir(parents=True)
    inodes.update_all(str(deep))
    assert inodes.get_id(str(deep)) == os.lstat(str(deep)).st_ino
    parent = str(tree / "n1")
    assert inodes.get_id(parent) == os.lstat(parent).st_ino


def test_update_all_missing_raises(tree):
    inodes = Inodes()
    inodes.scan(str(tree))
    with pytest.raises(FileNotFoundError):
        inodes.update_all(str(tree / "gone"))