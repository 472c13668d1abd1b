"""Path helpers for sandbox files.

Everything here is pure string work: nothing touches the sandbox. Paths use
POSIX separators whatever the host platform is.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

SOURCE_LIKE_EXTENSIONS = frozenset({".js", ".jsx", ".ts", ".tsx"})

IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".ico", ".avif", ".tiff", ".tif"}
)

BINARY_EXTENSIONS = IMAGE_EXTENSIONS | frozenset(
    {
        # fonts
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        # archives
        ".zip", ".gz", ".tgz", ".tar", ".bz2", ".7z", ".rar",
        # media
        ".mp3", ".mp4", ".wav", ".ogg", ".webm", ".mov", ".avi",
        # documents and executables
        ".pdf", ".wasm", ".exe", ".dll", ".so", ".dylib", ".bin",
    }
)

ROOT_LAYOUT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")


@dataclass(frozen=True)
class PathClass:
    """Classification of a path by its extension."""

    source_like: bool
    image: bool
    binary: bool


def normalize(path: str) -> str:
    """Normalize a sandbox path.

    Backslashes become slashes, ``.``/``..`` and repeated separators are
    collapsed and ``..`` segments that would climb above the start are dropped.
    The empty string is returned unchanged.
    """
    if not path:
        return path
    p = path.replace("\\", "/")
    absolute = p.startswith("/")
    p = posixpath.normpath(p)
    segments = [s for s in p.split("/") if s]
    while segments and segments[0] == "..":
        segments.pop(0)
    joined = "/".join(segments)
    if absolute:
        return "/" + joined
    return joined or "."


def dir_name(path: str) -> str:
    """Parent directory of a normalized path ('.' for a bare name)."""
    parent = posixpath.dirname(path)
    return parent or "."


def base_name(path: str) -> str:
    """Last segment of a normalized path."""
    return posixpath.basename(path)


def extension(path: str) -> str:
    _, ext = posixpath.splitext(base_name(path))
    return ext.lower()


def classify(path: str) -> PathClass:
    """Classify a path as source-like, image and/or binary by extension.

    Reads and writes must both go through this function so a file is never
    written as text and read back as binary.
    """
    ext = extension(path)
    return PathClass(
        source_like=ext in SOURCE_LIKE_EXTENSIONS,
        image=ext in IMAGE_EXTENSIONS,
        binary=ext in BINARY_EXTENSIONS,
    )


def canonical_key(path: str) -> str:
    """Normalized path without the leading '/', so '/a.txt' and 'a.txt' share one key."""
    return normalize(path).lstrip("/") or "."


def is_image_file(path: str) -> bool:
    return classify(path).image


def is_binary_file(path: str) -> bool:
    return classify(path).binary


def is_source_like_file(path: str) -> bool:
    return classify(path).source_like


def is_root_layout_file(path: str, router_type: str = "app") -> bool:
    """Whether ``path`` is the root layout (App router) or custom App (Pages router)."""
    p = normalize(path).lstrip("/")
    if p.startswith("./"):
        p = p[2:]
    if p.startswith("src/"):
        p = p[len("src/") :]
    stem = "app/layout" if router_type == "app" else "pages/_app"
    return any(p == stem + ext for ext in ROOT_LAYOUT_EXTENSIONS)
