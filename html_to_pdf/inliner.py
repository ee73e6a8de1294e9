#!/usr/bin/env python3
"""
Resource inlining: makes the root document self-contained.

Stylesheet links become <style> blocks and image references become data URIs.
References are matched by bare file name so that absolute, relative and
bare references all resolve. Two assets sharing a file name can therefore
both match the same reference; `strict_paths` compares full relative paths
instead.

MIT License - Copyright (c) 2025 HTML to PDF Converter
"""

import base64
import posixpath
import re
from typing import Mapping, Optional, Union

from .console import ConsoleLogger


IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg", "ico", "bmp")

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

_LINK_TAG = r'<link[^>]*href=["\']([^"\']*)["\'][^>]*>'
_ATTRIBUTE = r'(?<![\w-])(src|href)=["\']([^"\']*)["\']'


def get_extension(path: str) -> str:
    name = posixpath.basename(path)
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def get_mime_type(path: str) -> str:
    return MIME_TYPES.get(get_extension(path), DEFAULT_MIME_TYPE)


def is_image_path(path: str) -> bool:
    return get_extension(path) in IMAGE_EXTENSIONS


def _normalize_reference(reference: str) -> str:
    reference = reference.split("?", 1)[0].split("#", 1)[0]
    while reference.startswith("./"):
        reference = reference[2:]
    return reference.lstrip("/")


class ResourceInliner:
    """Rewrite a root document so it has no external file references."""

    def __init__(self, strict_paths: bool = False, logger: Optional[ConsoleLogger] = None):
        self.strict_paths = strict_paths
        self.logger = logger or ConsoleLogger(quiet=True)

    def _matches(self, reference: str, asset_path: str) -> bool:
        if reference.startswith("data:"):
            return False
        if self.strict_paths:
            return _normalize_reference(reference) == _normalize_reference(asset_path)
        return reference.endswith(posixpath.basename(asset_path))

    def inline(self, document: str, files: Mapping[str, Union[str, bytes]]) -> str:
        """Inline every stylesheet and image asset found in `files`.

        Assets that match nothing are left alone; the original reference
        stays in place.
        """
        result = self._inline_stylesheets(document, files)
        return self._inline_images(result, files)

    def _inline_stylesheets(self, document: str, files: Mapping[str, Union[str, bytes]]) -> str:
        result = document
        for path, content in files.items():
            if not path.lower().endswith(".css"):
                continue
            if isinstance(content, bytes):
                try:
                    content = content.decode("utf-8")
                except UnicodeDecodeError:
                    self.logger.warning(f"Skipping stylesheet {path}: not valid UTF-8")
                    continue

            style_tag = f'<style type="text/css">\n{content}\n</style>'

            def replace_link(match, path=path, style_tag=style_tag):
                if self._matches(match.group(1), path):
                    return style_tag
                return match.group(0)

            result, count = re.subn(_LINK_TAG, replace_link, result, flags=re.IGNORECASE)
            if count:
                self.logger.debug(f"Inlined stylesheet {path}")
        return result

    def _inline_images(self, document: str, files: Mapping[str, Union[str, bytes]]) -> str:
        result = document
        for path, content in files.items():
            if not is_image_path(path):
                continue
            raw = content.encode("utf-8") if isinstance(content, str) else bytes(content)
            encoded = base64.b64encode(raw).decode("ascii")
            data_url = f"data:{get_mime_type(path)};base64,{encoded}"

            def replace_attribute(match, path=path, data_url=data_url):
                if self._matches(match.group(2), path):
                    return f'{match.group(1)}="{data_url}"'
                return match.group(0)

            result = re.sub(_ATTRIBUTE, replace_attribute, result, flags=re.IGNORECASE)

            # Quoted path literals inside inline scripts and JSON configuration;
            # attribute values (alt="...", data-src="...") are left alone
            candidates = [path, f"./{path}"]
            if not self.strict_paths:
                candidates.append(posixpath.basename(path))
            for candidate in dict.fromkeys(candidates):
                result = re.sub(r'(?<!=)"' + re.escape(candidate) + '"', lambda _m, url=data_url: f'"{url}"', result)

            self.logger.debug(f"Inlined image {path} ({len(raw)} bytes)")
        return result
