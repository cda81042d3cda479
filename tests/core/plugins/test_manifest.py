"""Tests for CSXS manifest parsing."""

import pytest

from zxp_manager.core.plugins.exceptions import InvalidManifestError, ManifestNotFoundError
from zxp_manager.core.plugins.manifest import (
    UNKNOWN_VERSION,
    decode_lossy,
    parse_manifest,
    parse_manifest_file,
)

from tests.conftest import manifest_xml


class TestParseManifest:
    """Identity extraction from manifest text."""

    @pytest.mark.parametrize("bundle_id", [
        "com.example.tool",
        "com.adobe.CCX.start",
        "my-plugin",
        "com.example.tool.panel.main",
    ])
    def test_bundle_id_returned_unchanged(self, bundle_id):
        manifest = parse_manifest(manifest_xml(bundle_id=bundle_id))
        assert manifest.bundle_id == bundle_id

    def test_all_attributes(self):
        manifest = parse_manifest(manifest_xml("com.example.tool", "Example Tool", "2.1.0"))
        assert manifest.name == "Example Tool"
        assert manifest.version == "2.1.0"

    def test_missing_bundle_id_is_invalid(self):
        with pytest.raises(InvalidManifestError):
            parse_manifest(manifest_xml(bundle_id=None))

    def test_empty_bundle_id_is_invalid(self):
        with pytest.raises(InvalidManifestError):
            parse_manifest(manifest_xml(bundle_id=""))

    def test_missing_version_defaults_to_unknown(self):
        manifest = parse_manifest(manifest_xml(version=None))
        assert manifest.version == UNKNOWN_VERSION == "Unknown"

    def test_empty_version_defaults_to_unknown(self):
        assert parse_manifest(manifest_xml(version="")).version == "Unknown"

    def test_missing_name_falls_back_to_bundle_id(self):
        manifest = parse_manifest(manifest_xml(bundle_id="com.example.noname", name=None))
        assert manifest.name == "com.example.noname"

    def test_no_manifest_element(self):
        with pytest.raises(InvalidManifestError):
            parse_manifest('<?xml version="1.0"?><Other ExtensionBundleId="x"/>')

    def test_malformed_markup(self):
        with pytest.raises(InvalidManifestError):
            parse_manifest('<ExtensionManifest ExtensionBundleId="x"')

    def test_empty_document(self):
        with pytest.raises(InvalidManifestError):
            parse_manifest("")

    def test_nested_element_is_found(self):
        text = (
            '<Root><Wrapper>'
            '<ExtensionManifest ExtensionBundleId="com.example.nested"/>'
            '</Wrapper></Root>'
        )
        assert parse_manifest(text).bundle_id == "com.example.nested"

    def test_first_non_empty_identifier_wins(self):
        text = (
            '<Root>'
            '<ExtensionManifest ExtensionBundleId=""/>'
            '<ExtensionManifest ExtensionBundleId="com.example.first"/>'
            '<ExtensionManifest ExtensionBundleId="com.example.second"/>'
            '</Root>'
        )
        assert parse_manifest(text).bundle_id == "com.example.first"

    def test_namespaced_element(self):
        text = (
            '<m:ExtensionManifest xmlns:m="urn:example" '
            'ExtensionBundleId="com.example.ns"/>'
        )
        assert parse_manifest(text).bundle_id == "com.example.ns"

    def test_other_content_ignored(self):
        text = manifest_xml().replace(
            "<ExtensionList>", "<!-- comment --><Unknown attr='1'/><ExtensionList>"
        )
        assert parse_manifest(text).bundle_id == "com.example.tool"


class TestLossyDecoding:
    """Best-effort decoding of manifest bytes."""

    def test_invalid_utf8_is_replaced(self):
        raw = b'<ExtensionManifest ExtensionBundleId="com.example.x" ExtensionBundleName="Caf\xe9"/>'
        manifest = parse_manifest(raw)
        assert manifest.bundle_id == "com.example.x"
        assert manifest.name == "Caf\ufffd"

    def test_declared_encoding_does_not_break_parsing(self):
        raw = manifest_xml().replace("UTF-8", "ISO-8859-1").encode("utf-8")
        assert parse_manifest(raw).bundle_id == "com.example.tool"

    def test_utf8_bom(self):
        raw = b"\xef\xbb\xbf" + manifest_xml().encode("utf-8")
        assert parse_manifest(raw).bundle_id == "com.example.tool"

    def test_utf16_bom(self):
        raw = b"\xff\xfe" + manifest_xml().replace("UTF-8", "UTF-16").encode("utf-16-le")
        assert parse_manifest(raw).bundle_id == "com.example.tool"

    def test_decode_lossy_plain(self):
        assert decode_lossy("hé".encode("utf-8")) == "hé"


class TestParseManifestFile:

    def test_missing_file(self, temp_dir):
        with pytest.raises(ManifestNotFoundError) as exc_info:
            parse_manifest_file(temp_dir / "CSXS" / "manifest.xml")
        assert exc_info.value.kind == "ManifestNotFound"

    def test_invalid_file_carries_path(self, temp_dir):
        path = temp_dir / "manifest.xml"
        path.write_text("<not-xml", encoding="utf-8")
        with pytest.raises(InvalidManifestError) as exc_info:
            parse_manifest_file(path)
        assert exc_info.value.path == path

    def test_valid_file(self, temp_dir):
        path = temp_dir / "manifest.xml"
        path.write_text(manifest_xml("com.example.file", "File", "3.0"), encoding="utf-8")
        manifest = parse_manifest_file(path)
        assert (manifest.bundle_id, manifest.name, manifest.version) == ("com.example.file", "File", "3.0")
