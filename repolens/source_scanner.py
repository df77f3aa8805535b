"""Remote source discovery: filter a folder listing and download its sources."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Callable, List, Protocol, Sequence

from .config import DEFAULT_EXTENSIONS
from .errors import AnalysisCancelled, InternalAnalysisError
from .logging import get_logger
from .models import RepoRef, SourceFile


class RepositoryClient(Protocol):
    """Remote operations the scanner relies on."""

    def list_files_recursive(self, ref: RepoRef) -> Sequence[str]:
        ...

    def get_content(self, owner: str, repo: str, path: str, ref: str) -> str:
        ...


@dataclass
class IgnoreRule:
    """Gitignore-style exclusion pattern applied to listed paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str) -> bool:
        if not self.pattern:
            return False

        if self.directory_only:
            parts = rel_path.split("/")[:-1]
            if self.anchored or self.has_slash:
                return any(
                    fnmatchcase("/".join(parts[: index + 1]), self.pattern)
                    for index in range(len(parts))
                )
            return any(fnmatchcase(part, self.pattern) for part in parts)

        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


def class_name_for(path: str) -> str:
    """Return the file basename without its last extension."""
    slash = max(path.rfind("/"), path.rfind("\\"))
    file_name = path[slash + 1:] if slash >= 0 else path
    stem, dot, _ = file_name.rpartition(".")
    return stem if dot else file_name


class SourceScanner:
    """Selects analyzable files from a remote folder and downloads them."""

    def __init__(
        self,
        client: RepositoryClient,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.client = client
        self.extensions = tuple(extensions)
        self.rules = [rule for rule in map(build_ignore_rule, exclude_paths) if rule is not None]
        self.logger = get_logger("scanner")

    def list_paths(self, ref: RepoRef) -> List[str]:
        """Return analyzable paths from the folder listing, in listing order."""
        listed = self.client.list_files_recursive(ref)
        self.logger.info("Listed %d paths from %s/%s", len(listed), ref.owner, ref.repo)
        selected: List[str] = []
        seen: set[str] = set()
        for path in listed:
            normalised = path.replace("\\", "/").lstrip("/")
            if normalised in seen or not self.accepts(normalised):
                continue
            seen.add(normalised)
            selected.append(normalised)
        return selected

    def accepts(self, path: str) -> bool:
        if not path.endswith(self.extensions):
            return False
        return not any(rule.matches(path) for rule in self.rules)

    def fetch(
        self,
        ref: RepoRef,
        paths: Sequence[str],
        *,
        should_continue: Callable[[], bool] = lambda: True,
    ) -> List[SourceFile]:
        """Download ``paths`` and wrap them as source files."""
        files: List[SourceFile] = []
        base = ref.path.strip("/")
        for path in paths:
            if not should_continue():
                raise AnalysisCancelled("Analysis cancelled while downloading sources")
            remote_path = f"{base}/{path}" if base else path
            content = self.client.get_content(ref.owner, ref.repo, remote_path, ref.ref)
            class_name = class_name_for(path)
            if not class_name.strip():
                raise InternalAnalysisError(f"Cannot derive a class name from '{path}'")
            self.logger.debug("Downloaded %s (%d chars)", remote_path, len(content))
            files.append(SourceFile(path=path, content=content, class_name=class_name))
        self.logger.info("Collected %d sources from %s/%s", len(files), ref.owner, ref.repo)
        return files

    def scan(
        self,
        ref: RepoRef,
        *,
        should_continue: Callable[[], bool] = lambda: True,
        on_listed: Callable[[List[str]], None] | None = None,
    ) -> List[SourceFile]:
        """List, filter and download every analyzable file beneath ``ref``.

        ``on_listed`` receives the selected paths before any download starts.
        """
        paths = self.list_paths(ref)
        if on_listed is not None:
            on_listed(paths)
        return self.fetch(ref, paths, should_continue=should_continue)


__all__ = ["IgnoreRule", "RepositoryClient", "SourceScanner", "build_ignore_rule", "class_name_for"]
