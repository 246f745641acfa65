"""
Version resolvers for remote release metadata.
"""

from .base import VersionResolver
from .github import GitHubReleaseResolver
from .nodejs import NodeDistResolver
from .dotnet import DotnetReleaseResolver
from .fixed import FixedVersionResolver

RESOLVER_KINDS = {
    cls.kind: cls
    for cls in (GitHubReleaseResolver, NodeDistResolver, DotnetReleaseResolver, FixedVersionResolver)
}

__all__ = [
    "VersionResolver",
    "GitHubReleaseResolver",
    "NodeDistResolver",
    "DotnetReleaseResolver",
    "FixedVersionResolver",
    "RESOLVER_KINDS"
]
