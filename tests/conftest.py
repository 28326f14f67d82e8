from __future__ import annotations

from pathlib import Path

import pytest

from export_static import SiteLayout
from pages import PageConfig, make_registry


BASE_LAYOUT = """<html>
<head><title>{{ title }}</title><meta name="description" content="{{ description }}"></head>
<body data-nav="{{ active_nav }}">
{% include page_template %}
</body>
</html>
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def registry():
    return make_registry(
        [
            PageConfig("index", "Home Title", "Home description", "index"),
            PageConfig("about", "About Title", "About description", "about", "about"),
        ]
    )


@pytest.fixture
def site(tmp_path: Path) -> SiteLayout:
    layout = SiteLayout.from_root(tmp_path)
    write(layout.base_template, BASE_LAYOUT)
    write(layout.pages_dir / "index.html", "<h1>Welcome</h1>\n")
    write(layout.pages_dir / "about.html", "<h1>About us</h1>\n")
    write(layout.pages_dir / "mystery.html", "<h1>Unknown</h1>\n")
    write(layout.static_dir / "css" / "base.css", "body { margin: 0; }\n")
    (layout.static_dir / "images").mkdir(parents=True)
    (layout.static_dir / "images" / "logo.bin").write_bytes(bytes(range(256)))
    write(layout.static_dir / "robots.txt", "User-agent: *\n")
    return layout
