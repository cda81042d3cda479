from __future__ import annotations

"""Extension manifest parsing.

A bundle declares its identity on the root ``ExtensionManifest`` element of
``CSXS/manifest.xml``::

    <ExtensionManifest ExtensionBundleId="com.example.tool"
                       ExtensionBundleName="Example Tool"
                       ExtensionBundleVersion="1.2.0" ...>

Only those three attributes are read. The document is stream-parsed and
parsing stops at the first ``ExtensionManifest`` element that carries a
non-empty bundle identifier, so the rest of the document is never
validated.
"""

import io
import logging
from pathlib import Path, PurePosixPath
from typing import Union

from lxml import etree as ET  # type: ignore

from .exceptions import InvalidManifestError, ManifestNotFoundError
from .models import BundleManifest

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_RELATIVE_PATH",
    "UNKNOWN_VERSION",
    "decode_lossy",
    "parse_manifest",
    "parse_manifest_file",
]

# Location of the manifest inside a bundle directory and inside an archive.
MANIFEST_RELATIVE_PATH = PurePosixPath("CSXS/manifest.xml")

MANIFEST_ELEMENT = "ExtensionManifest"
ATTR_BUNDLE_ID = "ExtensionBundleId"
ATTR_BUNDLE_NAME = "ExtensionBundleName"
ATTR_BUNDLE_VERSION = "ExtensionBundleVersion"

UNKNOWN_VERSION = "Unknown"

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


def decode_lossy(raw: bytes) -> str:
    """Decode manifest bytes, replacing undecodable sequences instead of failing.

    A byte-order mark selects the codec; everything else is read as UTF-8.
    Invalid sequences become U+FFFD so a single bad byte in a display name
    does not make the whole bundle invisible.
    """
    for bom, codec in _BOMS:
        if raw.startswith(bom):
            return raw[len(bom):].decode(codec, errors="replace")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.debug("Manifest is not valid UTF-8, decoding lossily: %s", exc)
        return raw.decode("utf-8", errors="replace")


def parse_manifest(content: Union[str, bytes]) -> BundleManifest:
    """Parse manifest text into a :class:`BundleManifest`.

    Raises:
        InvalidManifestError: markup is malformed, or no ``ExtensionManifest``
            element carries a non-empty ``ExtensionBundleId``.
    """
    if isinstance(content, bytes):
        content = decode_lossy(content)
    if not content.strip():
        raise InvalidManifestError("Manifest document is empty")

    # Re-encode the normalised text; the explicit parser encoding overrides
    # whatever the XML declaration claims.
    source = io.BytesIO(content.encode("utf-8"))
    context = ET.iterparse(
        source,
        events=("start",),
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
    )

    try:
        for _event, element in context:
            if ET.QName(element).localname != MANIFEST_ELEMENT:
                continue
            bundle_id = element.get(ATTR_BUNDLE_ID) or ""
            if not bundle_id:
                continue
            return BundleManifest(
                bundle_id=bundle_id,
                name=element.get(ATTR_BUNDLE_NAME) or bundle_id,
                version=element.get(ATTR_BUNDLE_VERSION) or UNKNOWN_VERSION,
            )
    except ET.XMLSyntaxError as exc:
        raise InvalidManifestError(f"Malformed manifest markup: {exc}", cause=exc) from exc

    raise InvalidManifestError(
        f"No {MANIFEST_ELEMENT} element with a non-empty {ATTR_BUNDLE_ID}"
    )


def parse_manifest_file(manifest_path: Union[str, Path]) -> BundleManifest:
    """Read and parse a manifest document from disk.

    Raises:
        ManifestNotFoundError: the file is missing or unreadable.
        InvalidManifestError: see :func:`parse_manifest`.
    """
    manifest_path = Path(manifest_path)
    try:
        raw = manifest_path.read_bytes()
    except OSError as exc:
        raise ManifestNotFoundError(path=manifest_path, cause=exc) from exc

    try:
        return parse_manifest(raw)
    except InvalidManifestError as exc:
        exc.path = manifest_path
        raise
