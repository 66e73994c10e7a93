"""Tests for project folder name encoding."""

import pytest

from claude_archive.path_codec import decode_folder_name, encode_project_path, shorten_path


class TestDecodeFolderName:
    """Tests for decode_folder_name."""

    def test_plain_path(self):
        """Leading dash and separators decode to slashes."""
        assert decode_folder_name("-Users-martin-foo") == "/Users/martin/foo"

    def test_hidden_directory(self):
        """Double dash decodes to a hidden directory separator."""
        assert decode_folder_name("-Users-martin--config") == "/Users/martin/.config"

    def test_no_leading_dash(self):
        """Names without the marker still decode separators."""
        assert decode_folder_name("tmp-foo") == "tmp/foo"


class TestEncodeProjectPath:
    """Tests for encode_project_path."""

    def test_plain_path(self):
        assert encode_project_path("/Users/martin/foo") == "-Users-martin-foo"

    def test_hidden_directory(self):
        assert encode_project_path("/Users/martin/.config/app") == "-Users-martin--config-app"

    @pytest.mark.parametrize(
        "path",
        [
            "/Users/martin/foo",
            "/home/bob/.config/nvim",
            "/srv/projects/api/.git",
            "/a",
        ],
    )
    def test_round_trip(self, path):
        """Paths without literal dashes survive encode then decode."""
        assert decode_folder_name(encode_project_path(path)) == path


class TestShortenPath:
    """Tests for shorten_path."""

    def test_replaces_home(self):
        assert shorten_path("/home/alice/dev/app", home="/home/alice") == "~/dev/app"

    def test_home_itself(self):
        assert shorten_path("/home/alice", home="/home/alice") == "~"

    def test_other_path_unchanged(self):
        assert shorten_path("/srv/app", home="/home/alice") == "/srv/app"

    def test_prefix_is_not_a_boundary(self):
        """A sibling directory sharing the home prefix is left alone."""
        assert shorten_path("/home/alice2/app", home="/home/alice") == "/home/alice2/app"
