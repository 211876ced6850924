"""Shared test fixtures."""

from pathlib import Path

import pytest
from booknav.config import BookConfig, Config, LiveReloadConfig, ServerConfig, SidebarConfig
from booknav.core.markup import parse_toc_markup
from booknav.core.tree import NavigationTree

# Indices in document order:
#  0 Home, 1 Concepts, 2 CPS, 3 Free Monad, 4 Interpreters, 5 Insights (part),
#  6 Mini EVM, 7 Opcodes, 8 spacer, 9 External, 10 Top
NESTED_TOC = (
    '<ol class="chapter">'
    '<li class="chapter-item expanded affix "><a href="index.html">Home</a></li>'
    '<li class="chapter-item "><a href="concepts/index.html">Concepts</a>'
    '<a class="toggle"><div>❱</div></a></li>'
    '<li><ol class="section">'
    '<li class="chapter-item "><a href="concepts/cps.html">'
    '<strong aria-hidden="true">1.1.</strong> CPS</a></li>'
    '<li class="chapter-item "><a href="concepts/free/index.html">Free Monad</a>'
    '<a class="toggle"><div>❱</div></a></li>'
    '<li><ol class="section">'
    '<li class="chapter-item "><a href="concepts/free/interpreters.html">Interpreters</a></li>'
    "</ol></li>"
    "</ol></li>"
    '<li class="part-title">Insights</li>'
    '<li class="chapter-item expanded "><a href="insights/evm.html">Mini EVM</a>'
    '<a class="toggle"><div>❱</div></a></li>'
    '<li><ol class="section">'
    '<li class="chapter-item "><a href="insights/evm/opcodes.html">Opcodes</a></li>'
    "</ol></li>"
    '<li class="spacer"></li>'
    '<li class="chapter-item "><a href="https://example.com/x">External</a></li>'
    '<li class="chapter-item "><a href="#top">Top</a></li>'
    "</ol>"
)

# Flat book layout as emitted by the generator, with empty affix placeholders
FLAT_TOC = (
    '<ol class="chapter"><li class="chapter-item expanded affix "><a href="index.html">'
    "ALUX programming</a></li>"
    '<li class="chapter-item expanded affix "><li class="spacer"></li>'
    '<li class="chapter-item expanded affix "><li class="part-title">Concepts</li>'
    '<li class="chapter-item expanded "><a href="concepts/operational_semantics.html">'
    "Operational Semantics</a></li>"
    '<li class="chapter-item expanded "><a href="concepts/free_monad.html">Free Monad</a></li>'
    '<li class="chapter-item expanded "><a href="concepts/cps.html">'
    "Continuation-Passing Style</a></li>"
    '<li class="chapter-item expanded affix "><li class="part-title">Insights</li>'
    '<li class="chapter-item expanded "><a href="insights/evm-alg.html">Mini EVM</a></li>'
    '<li class="chapter-item expanded affix "><li class="spacer"></li>'
    '<li class="chapter-item expanded affix "><li class="part-title">Contributing</li>'
    '<li class="chapter-item expanded "><a href="about.html">About the book</a></li></ol>'
)


@pytest.fixture
def nested_tree() -> NavigationTree:
    return parse_toc_markup(NESTED_TOC)


@pytest.fixture
def flat_tree() -> NavigationTree:
    return parse_toc_markup(FLAT_TOC)


@pytest.fixture
def toc_file(tmp_path: Path) -> Path:
    """Write the nested TOC markup to a file."""
    path = tmp_path / "book" / "toc.html"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(NESTED_TOC, encoding="utf-8")
    return path


@pytest.fixture
def test_config(tmp_path: Path, toc_file: Path) -> Config:
    """Create a test configuration pointing at tmp_path.

    The build directory is the one holding the TOC file.
    """
    return Config(
        server=ServerConfig(),
        book=BookConfig(toc_file=toc_file, build_dir=toc_file.parent),
        sidebar=SidebarConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
