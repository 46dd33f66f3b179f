from typing import Optional, Tuple


def normalize_prefix(prefix: str | None) -> str:
    """Strip leading slashes and make sure a non-empty prefix ends with '/'."""
    p = (prefix or "").lstrip("/")
    if p and not p.endswith("/"):
        p += "/"
    return p


def split_key(key: str, root: str = "") -> Tuple[Optional[str], str]:
    """
    Return (folder, leaf) for an object key.

    The folder is the path segment right before the leaf, counted beyond
    the scan root. Keys with fewer than two segments under the root have
    no folder and get None.
    """
    rel = key[len(root):] if root and key.startswith(root) else key
    parts = rel.split("/")
    leaf = parts[-1]
    if len(parts) < 2:
        return None, leaf
    folder = parts[-2]
    return (folder or None), leaf


def folder_prefix(root: str, folder: str) -> str:
    return f"{normalize_prefix(root)}{folder}/"
