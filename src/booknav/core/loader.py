"""TOC file loading with mtime invalidation.

Loads the navigation tree from the generator's TOC output. A plain markup
file, the generated toc.js script and the JSON tree printed by
`booknav tree --format json` are accepted.
"""

import json
import logging
from pathlib import Path

from booknav.core.markup import extract_toc_markup, parse_toc_markup
from booknav.core.tree import NavigationTree, tree_from_dict

logger = logging.getLogger(__name__)


class TocLoader:
    """Loads and caches the navigation tree from a TOC file.

    The cached tree is considered valid while the file mtime is unchanged.
    """

    def __init__(self, toc_path: Path) -> None:
        """Initialize loader.

        Args:
            toc_path: Path to toc.html (markup), toc.js (script) or a .json tree
        """
        self._toc_path = toc_path
        self._tree: NavigationTree | None = None
        self._mtime: float | None = None

    @property
    def toc_path(self) -> Path:
        """Path to the TOC file."""
        return self._toc_path

    def load(self) -> NavigationTree:
        """Load the navigation tree, reusing the cached tree when fresh.

        Returns:
            NavigationTree parsed from the TOC file

        Raises:
            FileNotFoundError: If the TOC file doesn't exist
            ValueError: If a toc.js script contains no TOC markup or a JSON tree
                is malformed
        """
        if not self._toc_path.exists():
            raise FileNotFoundError(f"TOC file not found: {self._toc_path}")

        mtime = self._toc_path.stat().st_mtime
        if self._tree is not None and self._mtime == mtime:
            return self._tree

        self._tree = self._parse(self._toc_path.read_text(encoding="utf-8"))
        self._mtime = mtime
        logger.info(f"Loaded {len(self._tree)} navigation entries from {self._toc_path}")
        return self._tree

    def _parse(self, text: str) -> NavigationTree:
        suffix = self._toc_path.suffix
        if suffix == ".json":
            try:
                return tree_from_dict(json.loads(text))
            except (KeyError, TypeError) as e:
                raise ValueError(f"Invalid navigation JSON in {self._toc_path}: {e!r}") from e
        if suffix == ".js":
            text = extract_toc_markup(text)
        return parse_toc_markup(text)

    def invalidate(self) -> None:
        """Drop the cached tree so the next load re-reads the file."""
        self._tree = None
        self._mtime = None
