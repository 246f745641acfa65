"""Tests for version resolvers against fixed sample responses."""

import urllib.error

import pytest

from provisioner.errors import ConfigError, ResolutionError
from provisioner.resolvers import RESOLVER_KINDS
from provisioner.resolvers import dotnet as dotnet_module
from provisioner.resolvers import github as github_module
from provisioner.resolvers import nodejs as nodejs_module
from provisioner.resolvers.dotnet import DotnetReleaseResolver
from provisioner.resolvers.fixed import FixedVersionResolver
from provisioner.resolvers.github import GitHubReleaseResolver
from provisioner.resolvers.nodejs import NodeDistResolver


NODE_INDEX = [
    {"version": "v23.3.0", "date": "2024-11-20", "lts": False},
    {"version": "v22.11.0", "date": "2024-10-29", "lts": "Jod"},
    {"version": "v20.18.1", "date": "2024-11-20", "lts": "Iron"},
]

DOTNET_INDEX = {
    "releases-index": [
        {"channel-version": "10.0", "latest-sdk": "10.0.100-preview.1",
         "release-type": "sts", "support-phase": "preview"},
        {"channel-version": "9.0", "latest-sdk": "9.0.101",
         "release-type": "sts", "support-phase": "active"},
        {"channel-version": "8.0", "latest-sdk": "8.0.404",
         "release-type": "lts", "support-phase": "active"},
        {"channel-version": "6.0", "latest-sdk": "6.0.428",
         "release-type": "lts", "support-phase": "eol"},
    ]
}

PWSH_RELEASES = [
    {"tag_name": "v7.5.0-rc.1", "draft": False, "prerelease": True},
    {"tag_name": "v7.4.7", "draft": True, "prerelease": False},
    {"tag_name": "v7.4.6", "draft": False, "prerelease": False},
    {"tag_name": "v7.2.24", "draft": False, "prerelease": False},
]


class FetchRecorder:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def __call__(self, url, timeout, headers=None):
        self.urls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_registry_lists_all_kinds():
    assert set(RESOLVER_KINDS) == {"github", "nodejs", "dotnet", "fixed"}


@pytest.mark.parametrize("channel,expected", [("latest", "23.3.0"), ("lts", "22.11.0")])
def test_nodejs_channels(monkeypatch, channel, expected):
    monkeypatch.setattr(nodejs_module, "fetch_json", FetchRecorder(NODE_INDEX))
    assert NodeDistResolver().resolve(channel) == expected


@pytest.mark.parametrize("channel,expected", [
    ("lts", "8.0.404"),
    ("sts", "9.0.101"),
    ("latest", "9.0.101"),
])
def test_dotnet_channels_skip_preview_and_eol(monkeypatch, channel, expected):
    monkeypatch.setattr(dotnet_module, "fetch_json", FetchRecorder(DOTNET_INDEX))
    assert DotnetReleaseResolver().resolve(channel) == expected


def test_github_latest_strips_tag_prefix(monkeypatch):
    fetch = FetchRecorder({"tag_name": "v7.5.0"})
    monkeypatch.setattr(github_module, "fetch_json", fetch)
    resolver = GitHubReleaseResolver({"repo": "PowerShell/PowerShell", "lts_tag_prefix": "v7.4."})

    assert resolver.resolve("latest") == "7.5.0"
    assert fetch.urls == ["https://api.github.com/repos/PowerShell/PowerShell/releases/latest"]


def test_github_lts_skips_drafts_and_prereleases(monkeypatch):
    monkeypatch.setattr(github_module, "fetch_json", FetchRecorder(PWSH_RELEASES))
    resolver = GitHubReleaseResolver({"repo": "PowerShell/PowerShell", "lts_tag_prefix": "v7.4."})
    assert resolver.resolve("lts") == "7.4.6"


def test_github_without_lts_prefix_rejects_lts_before_network(monkeypatch):
    fetch = FetchRecorder()
    monkeypatch.setattr(github_module, "fetch_json", fetch)
    resolver = GitHubReleaseResolver({"repo": "astral-sh/uv"})

    with pytest.raises(ConfigError):
        resolver.resolve("lts")
    assert fetch.urls == []


def test_github_requires_repo():
    with pytest.raises(ConfigError):
        GitHubReleaseResolver({})


def test_github_sends_token(monkeypatch):
    captured = {}

    def fake_fetch(url, timeout, headers=None):
        captured.update(headers or {})
        return {"tag_name": "0.5.11"}

    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    monkeypatch.setattr(github_module, "fetch_json", fake_fetch)
    assert GitHubReleaseResolver({"repo": "astral-sh/uv"}).resolve("latest") == "0.5.11"
    assert captured["Authorization"] == "token secret"


def test_unknown_channel_fails_without_network(monkeypatch):
    fetch = FetchRecorder()
    monkeypatch.setattr(nodejs_module, "fetch_json", fetch)
    with pytest.raises(ConfigError):
        NodeDistResolver().resolve("sts")
    assert fetch.urls == []


def test_two_timeouts_exhaust_the_retry(monkeypatch):
    fetch = FetchRecorder(TimeoutError("timed out"), TimeoutError("timed out"))
    monkeypatch.setattr(nodejs_module, "fetch_json", fetch)

    with pytest.raises(ResolutionError):
        NodeDistResolver(retry_delay_seconds=0).resolve("lts")
    assert len(fetch.urls) == 2


def test_one_network_error_is_retried(monkeypatch):
    fetch = FetchRecorder(urllib.error.URLError("connection refused"), NODE_INDEX)
    monkeypatch.setattr(nodejs_module, "fetch_json", fetch)

    assert NodeDistResolver(retry_delay_seconds=0).resolve("lts") == "22.11.0"
    assert len(fetch.urls) == 2


def test_unparseable_response_is_resolution_error(monkeypatch):
    monkeypatch.setattr(nodejs_module, "fetch_json", FetchRecorder({"unexpected": True}, []))
    with pytest.raises(ResolutionError):
        NodeDistResolver(retry_delay_seconds=0).resolve("latest")


def test_fixed_resolver_returns_pinned_versions():
    resolver = FixedVersionResolver({"versions": {"lts": "v1.2.3"}})
    assert resolver.channels == ("lts",)
    assert resolver.resolve("lts") == "1.2.3"
    with pytest.raises(ConfigError):
        resolver.resolve("latest")


def test_fixed_resolver_needs_versions():
    with pytest.raises(ConfigError):
        FixedVersionResolver({})
