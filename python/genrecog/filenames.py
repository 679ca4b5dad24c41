"""File name patterns used by code generators."""

GENERATED_CODE_PREFIX = "TemporaryGeneratedFile_"

# Matched immediately before the last "." of the path, in this order.
GENERATED_CODE_SUFFIXES = (
    "AssemblyInfo",
    ".designer",
    ".generated",
    ".g",
    ".g.i",
    ".AssemblyAttributes",
)

_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz",
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
)


def _upper_invariant(text: str) -> str:
    # ASCII only: str.upper() would also fold non-ASCII letters ("ß" -> "SS").
    return text.translate(_ASCII_UPPER)


_PREFIX_UPPER = _upper_invariant(GENERATED_CODE_PREFIX)
_SUFFIXES_UPPER = tuple(_upper_invariant(s) for s in GENERATED_CODE_SUFFIXES)


def is_generated_file_name(path: str | None) -> bool:
    """Return True if path looks like a file written by a code generator.

    Checks the TemporaryGeneratedFile_ prefix first, then the known suffixes
    sitting right before the final extension ("Form1.Designer.cs",
    "AssemblyInfo.cs", "Parser.g.cs"). Comparison is case-insensitive with
    ASCII folding and never raises.
    """
    if not path:
        return False

    prefix_len = len(GENERATED_CODE_PREFIX)
    if len(path) > prefix_len and _upper_invariant(path[:prefix_len]) == _PREFIX_UPPER:
        return True

    dot = path.rfind(".")
    if dot < 0:
        return False

    for suffix in _SUFFIXES_UPPER:
        start = dot - len(suffix)
        if start < 0:
            continue
        if _upper_invariant(path[start:dot]) == suffix:
            return True
    return False
