import pytest

from zam.filesystem import LocalFileSystem


@pytest.fixture
def local():
    return LocalFileSystem()


def test_write_creates_parent_directories(local, tmp_path):
    target = tmp_path / "a" / "b" / "file.txt"
    local.write_text(target, "héllo\n")
    assert local.exists(target)
    assert local.read_text(target) == "héllo\n"


def test_write_replaces_content(local, tmp_path):
    target = tmp_path / "file.txt"
    local.write_text(target, "first")
    local.write_text(target, "second")
    assert local.read_text(target) == "second"


def test_append(local, tmp_path):
    target = tmp_path / ".zshrc"
    target.write_text("export X=1\n")
    local.append_text(target, "source y\n")
    assert target.read_text() == "export X=1\nsource y\n"


def test_copy_and_list_dir(local, tmp_path):
    source = tmp_path / "aliases"
    source.write_text("alias a='b'\n")
    backups = tmp_path / "backups"

    local.copy(source, backups / "one.bak")

    assert local.list_dir(backups) == ["one.bak"]
    assert (backups / "one.bak").read_text() == "alias a='b'\n"


def test_list_missing_dir_is_empty(local, tmp_path):
    assert local.list_dir(tmp_path / "missing") == []


def test_remove(local, tmp_path):
    target = tmp_path / "old.bak"
    target.write_text("")
    local.remove(target)
    assert not local.exists(target)


def test_read_missing_file_raises(local, tmp_path):
    with pytest.raises(FileNotFoundError):
        local.read_text(tmp_path / "missing")
