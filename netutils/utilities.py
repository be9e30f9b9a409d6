"""Text encoding and path helpers, plus TLS certificate name matching."""

from __future__ import annotations

import sys

_WINDOWS = sys.platform == "win32"


def to_utf8(text: str) -> bytes:
    """Encode a text string as UTF-8 bytes."""
    if not text:
        return b""
    return text.encode("utf-8", errors="surrogatepass")


def from_utf8(data: bytes) -> str:
    """Decode UTF-8 bytes to text; invalid input yields an empty string."""
    if not data:
        return ""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def to_wide_path(path: bytes) -> str:
    """Decode a UTF-8 path; on Windows, slashes become backslashes."""
    wide = from_utf8(path)
    if _WINDOWS:
        wide = wide.replace("/", "\\")
    return wide


def from_wide_path(path: str) -> bytes:
    """Encode a text path as UTF-8; on Windows, backslashes become slashes."""
    if _WINDOWS:
        path = path.replace("\\", "/")
    return to_utf8(path)


def to_native_path(path: str | bytes) -> str | bytes:
    """Convert a path to the form the platform's file API prefers.

    On Windows that is text with backslash separators; elsewhere it is
    UTF-8 bytes, left unchanged if already given as bytes.
    """
    if _WINDOWS:
        return to_wide_path(path) if isinstance(path, bytes) else path
    return path if isinstance(path, bytes) else from_wide_path(path)


def from_native_path(path: str | bytes) -> bytes:
    """Convert a native path to a portable UTF-8 path."""
    if isinstance(path, bytes):
        return path
    return from_wide_path(path)


def _split_first_label(name: str) -> tuple[int, str]:
    """Index of the first dot (or the length if none) and the text after it."""
    dot = name.find(".")
    if dot == -1:
        return len(name), ""
    return dot, name[dot + 1 :]


def verify_ssl_name(cert_name: str, hostname: str) -> bool:
    """Check whether a certificate name, possibly with a wildcard, matches a host."""
    if "*" not in cert_name:
        return cert_name == hostname

    first_dot, cert_rest = _split_first_label(cert_name)
    host_first_dot, host_rest = _split_first_label(hostname)
    cert_label = cert_name[:first_dot]
    host_label = hostname[:host_first_dot]

    # "*." at the start: the whole first label is a wildcard.
    if cert_label == "*":
        return cert_rest == host_rest

    # Leading "*" followed by more characters: match on the suffix.
    if cert_name[0] == "*":
        return hostname.endswith(cert_name[1:])

    if cert_rest != host_rest:
        return False

    for host_char, cert_char in zip(host_label, cert_label):
        if cert_char == "*":
            break
        if host_char != cert_char:
            return False

    # "*" at the end of the first label: the prefix check is enough.
    if first_dot != 0 and cert_name[first_dot - 1] == "*":
        return True

    # "*" in the middle of the first label: check the part after it too.
    for host_char, cert_char in zip(reversed(host_label), reversed(cert_label)):
        if cert_char == "*":
            break
        if host_char != cert_char:
            return False
    return True