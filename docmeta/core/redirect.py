"""Landing page and version manifest for the aggregate output tree.

``index.html`` forwards visitors to ``./<latest>/``; ``versions.json``
lists every built version so a theme's version switcher can discover them.
Both files are written to a temporary name and renamed into place, so a
re-run fully replaces the previous content.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from html import escape
from pathlib import Path
from string import Template
from urllib.parse import quote

from docmeta.core.errors import WriteError

logger = logging.getLogger(__name__)

REDIRECT_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Redirecting to $label</title>
<meta http-equiv="refresh" content="0; url=$target">
<link rel="canonical" href="$target">
</head>
<body>
<p>Redirecting to <a href="$target">$label</a>&hellip;</p>
</body>
</html>
"""
)

MANIFEST_FILENAME = "versions.json"


def _atomic_write(path: Path, text: str) -> None:
    """Write *text* to a sibling temp file and rename it over *path*."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class RedirectGenerator:
    """Writes the landing artifacts of an output tree.

    Parameters
    ----------
    filename:
        Name of the landing page inside the output root.
    """

    def __init__(self, filename: str = "index.html") -> None:
        self.filename = filename

    @staticmethod
    def render(latest: str) -> str:
        """HTML of a landing page forwarding to ``./<latest>/``."""
        target = f"./{quote(latest)}/"
        return REDIRECT_TEMPLATE.substitute(
            target=escape(target, quote=True), label=escape(latest)
        )

    def generate(self, latest: str, output_root: Path) -> Path:
        """Write (or replace) the landing page so it points only at *latest*.

        Raises
        ------
        WriteError
            If the output root is missing or not writable.
        """
        path = Path(output_root) / self.filename
        try:
            _atomic_write(path, self.render(latest))
        except OSError as exc:
            raise WriteError(f"Cannot write landing page {path}: {exc}") from exc
        logger.info("Landing page %s -> %s/", path, latest)
        return path

    @staticmethod
    def write_manifest(
        versions: Iterable[str], latest: str, output_root: Path
    ) -> Path:
        """Write ``versions.json`` listing the built *versions* and *latest*."""
        path = Path(output_root) / MANIFEST_FILENAME
        payload = {"versions": list(versions), "latest": latest}
        try:
            _atomic_write(path, json.dumps(payload, indent=2) + "\n")
        except OSError as exc:
            raise WriteError(f"Cannot write version manifest {path}: {exc}") from exc
        logger.debug("Version manifest %s: %s", path, payload["versions"])
        return path
