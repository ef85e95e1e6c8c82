"""
Tests for Path Filter.

Requires Python 3.11+.
"""

import pytest

from watcher.path_filter import PathFilter, compile_patterns


class TestCompilePatterns:
    """Test cases for compile_patterns."""

    def test_invalid_pattern_dropped(self):
        """Test that a malformed expression is ignored."""
        assert compile_patterns([r"\K"]) == []

    def test_valid_patterns_kept_in_order(self):
        """Test that valid expressions survive next to invalid ones."""
        compiled = compile_patterns([r".*\.go$", "(", r"\.py$"])
        assert [p.pattern for p in compiled] == [r".*\.go$", r"\.py$"]


class TestPathFilter:
    """Test cases for PathFilter."""

    def test_empty_sets_accept_everything(self):
        """Test that no patterns means no filtering."""
        path_filter = PathFilter()
        assert path_filter.accepts("/src/anything.txt")

    def test_include_only(self):
        """Test include patterns."""
        path_filter = PathFilter(include=[r".*\.go$"])
        assert path_filter.accepts("/src/main.go")
        assert not path_filter.accepts("/src/main.txt")

    def test_exclude_wins_over_include(self):
        """Test that a path matching both sets is rejected."""
        path_filter = PathFilter(include=[r".*\.go$"], exclude=[r".+_test\.go$"])
        assert path_filter.accepts("/src/file.go")
        assert not path_filter.accepts("/src/file_test.go")
        assert not path_filter.accepts("/src/file.txt")

    def test_exclude_only(self):
        """Test exclude patterns with no include set."""
        path_filter = PathFilter(exclude=[r"/\.git/"])
        assert not path_filter.accepts("/repo/.git/index")
        assert path_filter.accepts("/repo/main.c")

    def test_pattern_searches_full_path(self):
        """Test that an unanchored pattern matches anywhere in the path."""
        path_filter = PathFilter(include=["vendor"])
        assert path_filter.accepts("/repo/vendor/lib.go")

    @pytest.mark.parametrize(
        "include,exclude,path,accepted",
        [
            (["("], [], "/a.txt", True),
            ([], ["("], "/a.txt", True),
            (["(", r"\.c$"], [], "/a.txt", False),
        ],
    )
    def test_only_invalid_patterns_behave_as_empty(self, include, exclude, path, accepted):
        """Test that dropping every pattern of a set disables that set."""
        path_filter = PathFilter(include=include, exclude=exclude)
        assert path_filter.accepts(path) is accepted
