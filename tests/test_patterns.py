import pytest

from branchowners.patterns import PatternSyntaxError, compile_pattern


def test_basename_glob_matches_anywhere():
    p = compile_pattern("*.md")
    assert p.matches("README.md")
    assert p.matches("docs/README.md")
    assert not p.matches("docs/README.mdx")


def test_directory_shorthand_matches_at_any_depth():
    p = compile_pattern("docs/")
    assert p.matches("docs/a.md")
    assert p.matches("docs/a/b.md")
    assert p.matches("sub/docs/readme.md")
    assert not p.matches("docs")


def test_leading_slash_anchors_to_root():
    p = compile_pattern("/docs/")
    assert p.matches("docs/readme.md")
    assert not p.matches("sub/docs/readme.md")


def test_inner_slash_anchors_to_root():
    p = compile_pattern("src/legacy")
    assert p.matches("src/legacy/old.go")
    assert not p.matches("vendor/src/legacy/old.go")


def test_trailing_star_matches_direct_children_only():
    p = compile_pattern("docs/*")
    assert p.matches("docs/a.md")
    assert not p.matches("docs/a/b.md")
    assert not p.matches("x/docs/a.md")


def test_double_star_crosses_dirs():
    p = compile_pattern("docs/**")
    assert p.matches("docs/a.md")
    assert p.matches("docs/a/b.md")


def test_leading_double_star_matches_any_depth():
    p = compile_pattern("**/logs")
    assert p.matches("logs")
    assert p.matches("a/b/logs/today.txt")
    assert not p.matches("catalogs/x")


def test_middle_double_star_matches_zero_or_more_dirs():
    p = compile_pattern("a/**/b")
    assert p.matches("a/b")
    assert p.matches("a/x/y/b")
    assert not p.matches("a/xb")


def test_bare_name_matches_file_or_directory():
    p = compile_pattern("Makefile")
    assert p.matches("Makefile")
    assert p.matches("tools/Makefile")
    assert not p.matches("Makefile.am")


def test_single_char_and_classes():
    assert compile_pattern("file?.txt").matches("file1.txt")
    assert not compile_pattern("file?.txt").matches("file/.txt")
    assert compile_pattern("[ab].py").matches("pkg/a.py")
    assert not compile_pattern("[!ab].py").matches("a.py")


def test_escaped_space():
    assert compile_pattern("my\\ file.txt").matches("docs/my file.txt")


def test_star_alone_matches_everything():
    p = compile_pattern("*")
    assert p.matches("main.go")
    assert p.matches("a/b/c.txt")


@pytest.mark.parametrize("pat", ["", "   ", "/", "//"])
def test_root_and_empty_patterns_rejected(pat):
    with pytest.raises(PatternSyntaxError):
        compile_pattern(pat)
