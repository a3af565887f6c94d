import pytest

from repox.domain.remotes import derive_name, load_remotes, parse_remotes, render_remotes
from repox.errors import ConfigurationError, ParseError


CONFIG_TEXT = """\
# work repositories
https://example.com/a.git
  git@github.com:owner/b.git   # trailing comment

ssh://git@codeberg.org/owner/c
"""


def test_parse_remotes_skips_comments_and_blank_lines():
    remotes = parse_remotes(CONFIG_TEXT)

    assert [remote.name for remote in remotes] == ["a", "b", "c"]
    assert [remote.url for remote in remotes] == [
        "https://example.com/a.git",
        "git@github.com:owner/b.git",
        "ssh://git@codeberg.org/owner/c",
    ]
    assert [remote.line_number for remote in remotes] == [2, 3, 5]


def test_parse_remotes_names_have_no_slash():
    for remote in parse_remotes(CONFIG_TEXT):
        assert remote.name
        assert "/" not in remote.name


def test_parse_remotes_empty_or_comment_only():
    assert parse_remotes("") == []
    assert parse_remotes("\n   \n# only a comment\n\t# another\n") == []


def test_parse_remotes_rejects_two_tokens():
    with pytest.raises(ParseError) as excinfo:
        parse_remotes("https://example.com/a.git\nhttps://example.com/b.git extra\n")

    assert excinfo.value.line_number == 2
    assert excinfo.value.line == "https://example.com/b.git extra"
    assert "line 2" in str(excinfo.value)


def test_parse_error_is_configuration_error():
    with pytest.raises(ConfigurationError):
        parse_remotes("one two")


def test_parse_remotes_rejects_duplicate_names():
    text = "https://github.com/x/tool.git\nhttps://codeberg.org/y/tool\n"
    with pytest.raises(ConfigurationError) as excinfo:
        parse_remotes(text)

    assert "tool" in str(excinfo.value)
    assert "line 1" in str(excinfo.value)
    assert "line 2" in str(excinfo.value)


def test_parse_remotes_rejects_unnamed_url():
    with pytest.raises(ParseError):
        parse_remotes("https://example.com/.git\n")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/owner/repo.git", "repo"),
        ("https://example.com/owner/repo", "repo"),
        ("https://example.com/owner/repo.git/", "repo"),
        ("git@github.com:owner/repo.git", "repo"),
        ("host:repo.git", "repo"),
        ("https://example.com/owner/my.gitlab", "my.gitlab"),
    ],
)
def test_derive_name(url, expected):
    assert derive_name(url) == expected


def test_render_then_parse_is_stable():
    remotes = parse_remotes(CONFIG_TEXT)
    rendered = render_remotes(remotes)
    reparsed = parse_remotes(rendered)

    assert [(r.url, r.name) for r in reparsed] == [(r.url, r.name) for r in remotes]
    assert render_remotes(reparsed) == rendered


def test_render_remotes_empty():
    assert render_remotes([]) == ""


def test_load_remotes_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="no repox file"):
        load_remotes(tmp_path / "missing")


def test_load_remotes_directory(tmp_path):
    with pytest.raises(ConfigurationError, match="not a regular file"):
        load_remotes(tmp_path)


def test_load_remotes_tolerates_bom(tmp_path):
    path = tmp_path / ".repox"
    path.write_bytes(b"\xef\xbb\xbfhttps://example.com/a.git\n")

    assert [remote.name for remote in load_remotes(path)] == ["a"]
