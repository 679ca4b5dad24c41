"""Project-wide generated-file report.

Walks a project directory, skipping paths matched by .genrecogignore (or
a default template) and by every .gitignore in the tree, and classifies
every source file with the generated-code cache.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

import pathspec

from .cache import GeneratedCodeCache, default_cache
from .cancellation import CancellationToken, check_cancelled
from .filenames import is_generated_file_name
from .text_tree import load_tree

logger = logging.getLogger(__name__)

IGNORE_FILE = ".genrecogignore"

# Default ignore patterns (gitignore syntax)
DEFAULT_TEMPLATE = """\
.git/
.hg/
.svn/
.vs/
.idea/
.vscode/
bin/
obj/
packages/
node_modules/
__pycache__/
.venv/
venv/
"""

DEFAULT_EXTENSIONS = (".cs",)


def load_ignore_spec(
    project_dir: str | Path,
    include_gitignore: bool = True,
) -> pathspec.PathSpec:
    """Build the ignore matcher for a project.

    Uses .genrecogignore when present, DEFAULT_TEMPLATE otherwise. With
    include_gitignore, patterns from the root .gitignore and from nested
    .gitignore files (rewritten relative to the project root) follow.
    """
    project_path = Path(project_dir)
    ignore_path = project_path / IGNORE_FILE
    patterns: list[str] = []

    if ignore_path.exists():
        patterns.extend(ignore_path.read_text().splitlines())
    else:
        patterns.extend(DEFAULT_TEMPLATE.splitlines())

    if include_gitignore:
        base_spec = pathspec.PathSpec.from_lines("gitignore", patterns)
        patterns.extend(_load_gitignore_patterns(project_path, base_spec))

    return pathspec.PathSpec.from_lines("gitignore", patterns)


def _load_gitignore_patterns(project_path: Path, base_spec: pathspec.PathSpec) -> list[str]:
    patterns: list[str] = []

    for dirpath, dirnames, filenames in os.walk(project_path):
        rel_dir = os.path.relpath(dirpath, project_path)
        prefix = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")
        dirnames[:] = sorted(
            name for name in dirnames
            if not base_spec.match_file(f"{prefix}/{name}/" if prefix else f"{name}/")
        )
        if ".gitignore" not in filenames:
            continue
        gitignore_path = Path(dirpath) / ".gitignore"
        for line in gitignore_path.read_text().splitlines():
            patterns.append(_translate_gitignore_pattern(line, prefix))

    return patterns


def _translate_gitignore_pattern(pattern: str, prefix: str) -> str:
    """Rewrite a pattern from the .gitignore in directory prefix to be root-relative."""
    line = pattern.rstrip("\n")
    if not line or line.lstrip().startswith("#"):
        return line

    negated = line.startswith("!")
    body = line[1:] if negated else line

    if not prefix:
        return f"!{body}" if negated else body

    # A trailing "/" only marks a directory; it does not anchor the pattern.
    if body.startswith("/"):
        combined = f"{prefix}{body}"
    elif "/" not in body.rstrip("/"):
        combined = f"{prefix}/**/{body}"
    else:
        combined = f"{prefix}/{body}"

    return f"!{combined}" if negated else combined


def iter_source_files(
    project_dir: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    spec: pathspec.PathSpec | None = None,
) -> Iterator[Path]:
    """Yield files under project_dir with one of extensions, in sorted order."""
    project_path = Path(project_dir)
    if spec is None:
        spec = load_ignore_spec(project_path)
    wanted = {ext.lower() for ext in extensions}

    for dirpath, dirnames, filenames in os.walk(project_path):
        rel_dir = os.path.relpath(dirpath, project_path)
        prefix = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"
        dirnames[:] = sorted(
            name for name in dirnames
            if not spec.match_file(f"{prefix}{name}/")
        )
        for name in sorted(filenames):
            if Path(name).suffix.lower() not in wanted:
                continue
            if spec.match_file(f"{prefix}{name}"):
                continue
            yield Path(dirpath) / name


def find_generated_files(
    project_dir: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    cancel: CancellationToken | None = None,
    cache: GeneratedCodeCache | None = None,
) -> dict:
    """Classify every source file in a project.

    Args:
        project_dir: Project root directory
        extensions: File extensions to include
        cancel: Checked before each file and during comment scans
        cache: Cache to classify with (defaults to the process-wide one)

    Returns:
        Dict with project, files [{path, generated, reason}], total_files,
        generated_count. reason is "file_name", "comment" or None.
    """
    if cache is None:
        cache = default_cache()
    project_path = Path(project_dir)

    files = []
    for file_path in iter_source_files(project_path, extensions):
        check_cancelled(cancel)
        rel_path = file_path.relative_to(project_path).as_posix()
        try:
            # The classifier sees the bare file name, so prefix rules apply in any directory.
            tree = load_tree(file_path, file_path=file_path.name)
            generated = cache.is_generated(tree, cancel)
        except OSError as e:
            logger.debug(
                "workspace.read_error",
                extra={
                    "file_path": str(file_path),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            continue

        if not generated:
            reason = None
        elif is_generated_file_name(tree.file_path):
            reason = "file_name"
        else:
            reason = "comment"
        files.append({"path": rel_path, "generated": generated, "reason": reason})

    return {
        "project": str(project_path),
        "files": files,
        "total_files": len(files),
        "generated_count": sum(1 for f in files if f["generated"]),
    }
