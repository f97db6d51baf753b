import json

from zam.codec import HEADER
from zam.filesystem import LocalFileSystem
from zam.models import AliasMetadata
from zam.storage import AliasRepository, AliasStorage, MetadataStore


class TestAliasRepository:
    def test_load_missing_file_is_empty(self, fs, paths):
        repo = AliasRepository(fs, paths.aliases_file)
        assert repo.load() == {}

    def test_load(self, populated, paths):
        repo = AliasRepository(populated, paths.aliases_file)
        assert repo.load() == {"gs": "git status", "ll": "ls -la"}

    def test_save_rewrites_whole_file(self, fs, paths):
        fs.files[paths.aliases_file] = "garbage that is not kept\nalias old='x'\n"
        repo = AliasRepository(fs, paths.aliases_file)

        written = repo.save({"b": "two", "a": "one"})

        assert written == f"{HEADER}\nalias a='one'\nalias b='two'\n"
        assert fs.files[paths.aliases_file] == written
        assert fs.calls == [("write", paths.aliases_file)]

    def test_render_does_not_write(self, fs, paths):
        repo = AliasRepository(fs, paths.aliases_file)
        assert repo.render({"a": "one"}) == f"{HEADER}\nalias a='one'\n"
        assert fs.calls == []

    def test_last_writer_wins(self, fs, paths):
        """Two sessions loading the same file do not merge their changes"""
        fs.files[paths.aliases_file] = f"{HEADER}\nalias gs='git status'\n"
        first = AliasRepository(fs, paths.aliases_file)
        second = AliasRepository(fs, paths.aliases_file)

        mine = first.load()
        theirs = second.load()
        mine["a"] = "added by first"
        theirs["b"] = "added by second"
        first.save(mine)
        second.save(theirs)

        assert first.load() == {"gs": "git status", "b": "added by second"}


class TestMetadataStore:
    def test_read_missing_file(self, fs, paths):
        store = MetadataStore(fs, paths.metadata_file)
        assert store.read_metadata() == {}
        assert store.malformed is False

    def test_read_normalizes_legacy_records(self, fs, paths):
        fs.files[paths.metadata_file] = json.dumps({"gs": {"tag": "git"}, "ll": {"tags": ["shell"]}})
        store = MetadataStore(fs, paths.metadata_file)

        metadata = store.read_metadata()

        assert metadata["gs"].get_tags() == ["git"]
        assert metadata["ll"].get_tags() == ["shell"]

    def test_read_malformed_json_is_empty(self, fs, paths):
        fs.files[paths.metadata_file] = "{not json"
        store = MetadataStore(fs, paths.metadata_file)

        assert store.read_metadata() == {}
        assert store.malformed is True

    def test_read_non_object_json_is_malformed(self, fs, paths):
        fs.files[paths.metadata_file] = "[1, 2]"
        store = MetadataStore(fs, paths.metadata_file)

        assert store.read_metadata() == {}
        assert store.malformed is True

    def test_write_pretty_prints_and_drops_empty_records(self, fs, paths):
        store = MetadataStore(fs, paths.metadata_file)

        store.write_metadata({"gs": AliasMetadata(tags=["git"]), "ll": AliasMetadata()})

        content = fs.files[paths.metadata_file]
        assert json.loads(content) == {"gs": {"tags": ["git"]}}
        assert '\n  "gs": {\n    "tags": [' in content

    def test_write_after_malformed_read_keeps_corrupted_copy(self, fs, paths):
        fs.files[paths.metadata_file] = "{not json"
        store = MetadataStore(fs, paths.metadata_file)
        store.read_metadata()

        store.write_metadata({"gs": AliasMetadata(tags=["git"])})

        assert fs.files[paths.zam_dir / "metadata.corrupted"] == "{not json"
        assert json.loads(fs.files[paths.metadata_file]) == {"gs": {"tags": ["git"]}}


class TestAliasStorage:
    def test_list_all_joins_metadata(self, storage, populated):
        aliases = storage.list_all()

        assert [a.name for a in aliases] == ["gs", "ll"]
        assert aliases[0].tags == ["git"]
        assert aliases[1].tags == []

    def test_local_filesystem_round_trip(self, tmp_path):
        from zam.config import ZamPaths

        storage = AliasStorage(fs=LocalFileSystem(), paths=ZamPaths.default(tmp_path))

        storage.save({"gs": "git status"})
        storage.write_metadata({"gs": AliasMetadata(tags=["git"])})

        assert (tmp_path / ".zsh_aliases_managed").read_text() == f"{HEADER}\nalias gs='git status'\n"
        assert storage.load() == {"gs": "git status"}
        assert storage.read_metadata()["gs"].get_tags() == ["git"]
