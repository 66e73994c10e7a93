"""Tests for FileSetResolver and folder sizing."""

from claude_archive.archive_schema import ArchiveFileKind
from claude_archive.diagnostics import RecoveryStats
from claude_archive.file_set import (
    FileSetResolver,
    companion_folder_path,
    get_files_to_archive,
    get_folder_size,
)
from claude_archive.session_parser import SessionParser


class TestGetFolderSize:
    """Tests for get_folder_size."""

    def test_missing_folder_is_zero(self, tmp_path):
        assert get_folder_size(tmp_path / "missing") == 0

    def test_file_path_is_zero(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("abc")
        assert get_folder_size(f) == 0

    def test_recursive_sum(self, tmp_path):
        """Nested files are summed; directories contribute nothing."""
        root = tmp_path / "folder"
        (root / "a" / "b").mkdir(parents=True)
        (root / "one.bin").write_bytes(b"x" * 10)
        (root / "a" / "two.bin").write_bytes(b"x" * 20)
        (root / "a" / "b" / "three.bin").write_bytes(b"x" * 30)
        (root / "empty").mkdir()

        assert get_folder_size(root) == 60

    def test_empty_folder_is_zero(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert get_folder_size(tmp_path / "empty") == 0

    def test_symlinked_file_counts_target_size(self, tmp_path):
        """A folder holding only symlinks still has the size of what they point at."""
        target = tmp_path / "target.bin"
        target.write_bytes(b"x" * 42)
        root = tmp_path / "folder"
        root.mkdir()
        (root / "link.bin").symlink_to(target)
        (root / "dangling").symlink_to(tmp_path / "gone")

        assert get_folder_size(root) == 42

    def test_symlinked_directory_not_descended(self, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "big.bin").write_bytes(b"x" * 100)
        root = tmp_path / "folder"
        root.mkdir()
        (root / "dir-link").symlink_to(other, target_is_directory=True)

        assert get_folder_size(root) == 0


def test_companion_folder_path(tmp_path):
    assert companion_folder_path(tmp_path / "abc.jsonl") == tmp_path / "abc"


class TestResolve:
    """Tests for FileSetResolver.resolve."""

    def _parse(self, project_dir, session_id):
        return SessionParser().parse(project_dir / f"{session_id}.jsonl", project_dir)

    def test_transcript_only(self, project_dir, write_jsonl):
        write_jsonl(project_dir / "S.jsonl", [{"type": "user"}])
        session = self._parse(project_dir, "S")

        file_set = FileSetResolver().resolve(session)

        assert file_set.session_id == "S"
        assert [f.kind for f in file_set.files] == [ArchiveFileKind.TRANSCRIPT]
        assert file_set.files[0].name == "S.jsonl"
        assert file_set.total_size == session.size

    def test_canonical_order(self, project_dir, write_jsonl):
        """Transcript, companion folder, then each agent followed by its folder."""
        write_jsonl(project_dir / "S.jsonl", [{"type": "user"}])
        (project_dir / "S").mkdir()
        (project_dir / "S" / "blob.bin").write_bytes(b"x" * 100)
        write_jsonl(project_dir / "agent-a.jsonl", [{"sessionId": "S"}])
        (project_dir / "agent-a").mkdir()
        (project_dir / "agent-a" / "out.txt").write_bytes(b"y" * 5)
        write_jsonl(project_dir / "agent-b.jsonl", [{"sessionId": "S"}])
        write_jsonl(project_dir / "agent-c.jsonl", [{"sessionId": "OTHER"}])
        session = self._parse(project_dir, "S")

        file_set = FileSetResolver().resolve(session)

        assert [(f.name, f.kind) for f in file_set.files] == [
            ("S.jsonl", ArchiveFileKind.TRANSCRIPT),
            ("S/", ArchiveFileKind.COMPANION_FOLDER),
            ("agent-a.jsonl", ArchiveFileKind.AGENT_TRANSCRIPT),
            ("agent-a/", ArchiveFileKind.AGENT_COMPANION_FOLDER),
            ("agent-b.jsonl", ArchiveFileKind.AGENT_TRANSCRIPT),
        ]
        assert file_set.files[1].size == 100
        assert file_set.files[3].size == 5
        assert file_set.total_size == sum(f.size for f in file_set.files)

    def test_empty_companion_folder_excluded(self, project_dir, write_jsonl):
        write_jsonl(project_dir / "S.jsonl", [{"type": "user"}])
        (project_dir / "S" / "nested").mkdir(parents=True)
        session = self._parse(project_dir, "S")

        file_set = FileSetResolver().resolve(session)

        assert len(file_set.files) == 1

    def test_symlink_only_companion_folder_included(self, project_dir, write_jsonl, tmp_path):
        write_jsonl(project_dir / "S.jsonl", [{"type": "user"}])
        target = tmp_path / "shared.bin"
        target.write_bytes(b"z" * 7)
        (project_dir / "S").mkdir()
        (project_dir / "S" / "shared.bin").symlink_to(target)
        session = self._parse(project_dir, "S")

        file_set = FileSetResolver().resolve(session)

        assert [(f.name, f.size) for f in file_set.files][1] == ("S/", 7)

    def test_corrupt_agent_not_owned(self, project_dir, write_jsonl):
        """An agent with an unparseable first line is treated as unrelated."""
        write_jsonl(project_dir / "S.jsonl", [{"type": "user"}])
        write_jsonl(project_dir / "agent-bad.jsonl", ["{nope", '{"sessionId": "S"}'])
        session = self._parse(project_dir, "S")
        stats = RecoveryStats()

        file_set = FileSetResolver(stats).resolve(session)

        assert len(file_set.files) == 1
        assert stats.unreadable_agents >= 1

    def test_get_files_to_archive(self, project_dir, write_jsonl):
        write_jsonl(project_dir / "A.jsonl", [{}])
        write_jsonl(project_dir / "B.jsonl", [{}])
        sessions = [self._parse(project_dir, "A"), self._parse(project_dir, "B")]

        file_sets = get_files_to_archive(sessions)

        assert [fs.session_id for fs in file_sets] == ["A", "B"]
