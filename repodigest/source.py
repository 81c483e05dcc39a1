"""
Source materialization.

Turns a source descriptor (local directory or remote git URL) into a local
directory the walker can read. Remote sources are shallow-cloned into a
temporary directory that is removed when the context manager exits.
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional
from urllib.parse import urlparse, urlunparse

from .display import Display, LoggingDisplay
from .errors import RootNotFoundError, SourceError

REMOTE_SCHEMES = ("http", "https", "git", "ssh")
KNOWN_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")

_SCP_LIKE = re.compile(r"^(?P<user>[\w.-]+)@(?P<host>[\w.-]+):(?P<path>.+)$")


@dataclass
class Source:
    """A materialized source ready for traversal."""
    descriptor: str
    root: Path
    is_remote: bool = False
    branch: Optional[str] = None
    temp_dir: Optional[Path] = None


# =============================================================================
# URL HELPERS
# =============================================================================

def normalize_url(source: str) -> str:
    """Expand GitHub shortcuts and scp-style addresses into URLs."""
    source = source.strip()
    if source.startswith(("github.com/", "www.github.com/")):
        return f"https://{source}"
    match = _SCP_LIKE.match(source)
    if match and "://" not in source:
        host, path = match.group("host"), match.group("path")
        if host == "github.com":
            return f"https://github.com/{path}"
        return f"ssh://{match.group('user')}@{host}/{path}"
    return source


def is_remote_source(source: str) -> bool:
    """True when ``source`` names a remote repository rather than a local path."""
    url = normalize_url(source)
    return urlparse(url).scheme in REMOTE_SCHEMES


def validate_url(url: str, display: Optional[Display] = None) -> None:
    """Raise SourceError for unusable URLs; warn about unfamiliar hosts."""
    parsed = urlparse(url)
    if parsed.scheme not in REMOTE_SCHEMES:
        raise SourceError(f"Unsupported protocol in {url}. Use http, https, git or ssh.", url)
    if not parsed.hostname:
        raise SourceError(f"Invalid repository URL: {url}", url)
    if not any(host in parsed.hostname for host in KNOWN_HOSTS):
        (display or LoggingDisplay()).warn(
            f"Repository host {parsed.hostname} may not be fully supported"
        )


def repository_name(url: str) -> str:
    """Last path component of ``url`` without a ``.git`` suffix."""
    path = urlparse(url).path.rstrip("/")
    name = path.rsplit("/", 1)[-1] if path else ""
    if name.endswith(".git"):
        name = name[:-4]
    return name or "repository"


def add_token_to_url(url: str, token: Optional[str]) -> str:
    """Embed a GitHub token in an https URL for private clones."""
    if not token:
        return url
    parsed = urlparse(url)
    if parsed.scheme != "https" or parsed.hostname != "github.com":
        return url
    netloc = f"{token}:x-oauth-basic@{parsed.hostname}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return urlunparse(parsed._replace(netloc=netloc))


# =============================================================================
# CLONER
# =============================================================================

class RepositoryCloner:
    """Shallow clones via the git command line."""

    def __init__(self, display: Optional[Display] = None, git: str = "git"):
        self.display = display or LoggingDisplay()
        self.git = git

    def clone(
        self,
        url: str,
        dest: Path,
        branch: Optional[str] = None,
        token: Optional[str] = None,
        depth: int = 1,
    ) -> None:
        """Clone ``url`` into ``dest`` and drop its ``.git`` directory."""
        cmd: List[str] = [self.git, "clone", "--depth", str(depth), "--single-branch", "--no-tags"]
        if branch:
            cmd.extend(["--branch", branch])
        cmd.extend([add_token_to_url(url, token), str(dest)])

        self.display.info(f"Cloning {url}" + (f" (branch: {branch})" if branch else ""))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            )
        except FileNotFoundError:
            raise SourceError("git executable not found; install git to digest remote repositories", url)

        if result.returncode != 0:
            stderr = result.stderr or ""
            if token:
                stderr = stderr.replace(token, "***")
            raise SourceError(self.format_clone_error(stderr.strip(), url, branch), url)

        git_dir = dest / ".git"
        try:
            shutil.rmtree(git_dir)
        except FileNotFoundError:
            pass
        except OSError:
            self.display.warn("Could not clean up .git directory")

    @staticmethod
    def format_clone_error(error: str, url: str, branch: Optional[str] = None) -> str:
        """Clone failure message with a hint for the likely cause."""
        message = f"Failed to clone repository from {url}"
        if branch:
            message += f" (branch: {branch})"

        lowered = error.lower()
        if "not found" in lowered or "404" in lowered:
            message += (
                "\n\nPossible causes:"
                "\n  - Repository URL is incorrect"
                "\n  - Repository is private (use --token for authentication)"
                "\n  - Branch name is incorrect"
            )
        elif "authentication" in lowered or "403" in lowered or "could not read username" in lowered:
            message += (
                "\n\nAuthentication required:"
                "\n  - Use --token with a personal access token"
                "\n  - Ensure the token can read the repository"
            )
        elif "timed out" in lowered or "timeout" in lowered or "could not resolve host" in lowered:
            message += (
                "\n\nNetwork issue:"
                "\n  - Check your internet connection"
                "\n  - Try again in a few moments"
            )

        if error:
            message += f"\n\nOriginal error: {error}"
        return message


# =============================================================================
# MATERIALIZER
# =============================================================================

def resolve_local(source: str) -> Path:
    """Validate and resolve a local directory."""
    path = Path(source).expanduser().resolve()
    if not path.exists():
        raise RootNotFoundError(f"Directory does not exist: {path}", str(path))
    if not path.is_dir():
        raise RootNotFoundError(f"Path is not a directory: {path}", str(path))
    return path


@contextmanager
def materialize(
    source: str,
    branch: Optional[str] = None,
    token: Optional[str] = None,
    display: Optional[Display] = None,
    cloner: Optional[RepositoryCloner] = None,
) -> Iterator[Source]:
    """
    Yield a Source whose ``root`` is a readable local directory.

    Remote sources are cloned into a fresh temporary directory which is
    deleted on exit, after the caller has finished reading it.
    """
    display = display or LoggingDisplay()

    if not is_remote_source(source):
        root = resolve_local(source)
        yield Source(descriptor=str(root), root=root)
        return

    url = normalize_url(source)
    validate_url(url, display)
    token = token or os.environ.get("GITHUB_TOKEN")

    temp_dir = Path(tempfile.mkdtemp(prefix="repodigest-"))
    try:
        dest = temp_dir / repository_name(url)
        (cloner or RepositoryCloner(display)).clone(url, dest, branch=branch, token=token)
        yield Source(descriptor=url, root=dest, is_remote=True, branch=branch, temp_dir=temp_dir)
    finally:
        try:
            shutil.rmtree(temp_dir)
        except OSError:
            display.warn(f"Could not clean up temporary directory: {temp_dir}")
