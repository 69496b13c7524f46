import pytest

from argonkit.cache import (
    FileId,
    FileIdCache,
    FileIdMap,
    NoCache,
    RecursiveMode,
    get_file_id,
)


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "root"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "a.txt").write_text("a")
    (root / "sub" / "b.txt").write_text("b")
    (root / "sub" / "deep" / "c.txt").write_text("c")
    return root


def test_get_file_id_is_stable(tree):
    file = tree / "a.txt"
    assert get_file_id(file) == get_file_id(str(file))
    assert get_file_id(file) == FileId(get_file_id(file).device_id, get_file_id(file).inode_number)
    assert not get_file_id(file) == get_file_id(tree / "sub" / "b.txt")


def test_get_file_id_missing_raises(tmp_path):
    with pytest.raises(OSError):
        get_file_id(tmp_path / "missing")


def test_recursive_root_caches_whole_tree(tree):
    cache = FileIdMap()
    cache.add_root(tree, RecursiveMode.RECURSIVE)
    expected = {
        tree,
        tree / "a.txt",
        tree / "sub",
        tree / "sub" / "b.txt",
        tree / "sub" / "deep",
        tree / "sub" / "deep" / "c.txt",
    }
    assert set(cache.paths) == expected
    deep = tree / "sub" / "deep" / "c.txt"
    assert cache.cached_file_id(deep) == get_file_id(deep)


def test_non_recursive_root_caches_one_level(tree):
    cache = FileIdMap()
    cache.add_root(tree, RecursiveMode.NON_RECURSIVE)
    assert set(cache.paths) == {tree, tree / "a.txt", tree / "sub"}
    assert cache.cached_file_id(tree / "sub" / "b.txt") is None


def test_add_path_outside_roots_is_shallow(tree):
    cache = FileIdMap()
    cache.add_path(tree / "sub")
    assert set(cache.paths) == {tree / "sub", tree / "sub" / "b.txt", tree / "sub" / "deep"}


def test_add_missing_path_adds_nothing(tmp_path):
    cache = FileIdMap()
    cache.add_path(tmp_path / "missing")
    assert cache.paths == {}


def test_remove_path_removes_children(tree):
    cache = FileIdMap()
    cache.add_root(tree, RecursiveMode.RECURSIVE)
    cache.remove_path(tree / "sub")
    assert set(cache.paths) == {tree, tree / "a.txt"}


def test_remove_path_keeps_sibling_with_common_prefix(tmp_path):
    (tmp_path / "ab").mkdir()
    (tmp_path / "abc").mkdir()
    cache = FileIdMap()
    cache.add_path(tmp_path / "ab")
    cache.add_path(tmp_path / "abc")
    cache.remove_path(tmp_path / "ab")
    assert set(cache.paths) == {tmp_path / "abc"}


def test_remove_root(tree):
    cache = FileIdMap()
    cache.add_root(tree, RecursiveMode.RECURSIVE)
    cache.add_root(tree / "sub", RecursiveMode.RECURSIVE)
    cache.remove_root(tree)
    assert cache.roots == []
    assert cache.paths == {}


def test_rescan_picks_up_new_files(tree):
    cache = FileIdMap()
    cache.add_root(tree, RecursiveMode.RECURSIVE)
    new_file = tree / "sub" / "new.txt"
    new_file.write_text("n")
    assert cache.cached_file_id(new_file) is None
    cache.rescan()
    assert cache.cached_file_id(new_file) == get_file_id(new_file)


def test_no_cache_holds_nothing(tree):
    cache = NoCache()
    cache.add_path(tree)
    cache.rescan()
    cache.remove_path(tree)
    assert cache.cached_file_id(tree) is None


def test_file_id_cache_is_abstract():
    with pytest.raises(TypeError):
        FileIdCache()
    assert isinstance(FileIdMap(), FileIdCache)
    assert isinstance(NoCache(), FileIdCache)