"""Tests for changelog link builders."""

from __future__ import annotations

import pytest

from semrel.core.commits import parse_commit
from semrel.core.links import (
    GitHubLinkBuilder,
    GitLabLinkBuilder,
    PlainLinkBuilder,
    create_link_builder,
    parse_remote_url,
)
from semrel.core.version import Version

SHA = "0123456789abcdef0123456789abcdef01234567"


class TestParseRemoteUrl:
    """Tests for parse_remote_url()."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/owner/repo.git",
            "https://github.com/owner/repo",
            "https://user@github.com/owner/repo.git",
            "git@github.com:owner/repo.git",
            "ssh://git@github.com/owner/repo.git",
            "ssh://git@github.com:22/owner/repo",
        ],
    )
    def test_github_forms(self, url: str):
        assert parse_remote_url(url) == ("github.com", "owner/repo")

    def test_nested_gitlab_group(self):
        assert parse_remote_url("git@gitlab.com:group/sub/project.git") == (
            "gitlab.com",
            "group/sub/project",
        )

    def test_local_path_not_recognized(self):
        assert parse_remote_url("/srv/git/project.git") is None


class TestCreateLinkBuilder:
    """Tests for create_link_builder()."""

    def test_github(self):
        builder = create_link_builder("git@github.com:owner/repo.git")

        assert builder == GitHubLinkBuilder(owner="owner", repo="repo")

    def test_github_enterprise(self):
        builder = create_link_builder("https://github.mycorp.com/owner/repo.git")

        assert builder == GitHubLinkBuilder(owner="owner", repo="repo", host="github.mycorp.com")

    def test_gitlab(self):
        builder = create_link_builder("https://gitlab.example.com/group/project.git", tag_prefix="")

        assert builder == GitLabLinkBuilder(project_path="group/project", tag_prefix="", host="gitlab.example.com")

    @pytest.mark.parametrize("url", [None, "", "/srv/git/project.git", "https://bitbucket.org/o/r.git"])
    def test_plain_fallback(self, url: str | None):
        assert isinstance(create_link_builder(url), PlainLinkBuilder)

    def test_disabled(self):
        assert isinstance(create_link_builder("git@github.com:o/r.git", enabled=False), PlainLinkBuilder)


class TestLinks:
    """Links produced by each builder."""

    def test_github_links(self):
        builder = GitHubLinkBuilder(owner="owner", repo="repo")

        assert builder.build_version_tag_link(Version(1, 2, 0)) == "https://github.com/owner/repo/releases/tag/v1.2.0"
        assert builder.build_commit_link(parse_commit("fix: a", SHA)) == f"https://github.com/owner/repo/commit/{SHA}"

    def test_gitlab_links(self):
        builder = GitLabLinkBuilder(project_path="group/project")

        assert builder.build_version_tag_link(Version(1, 2, 0)) == "https://gitlab.com/group/project/-/tags/v1.2.0"
        assert builder.build_commit_link(parse_commit("fix: a", SHA)) == f"https://gitlab.com/group/project/-/commit/{SHA}"

    def test_plain_links_empty(self):
        builder = PlainLinkBuilder()

        assert builder.build_version_tag_link(Version(1, 0, 0)) == ""
        assert builder.build_commit_link(parse_commit("fix: a", SHA)) == ""
