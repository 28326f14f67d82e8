#!/usr/bin/env python3
"""
Build the site into a static bundle under dist/ and optionally preview it.

Every registered page in templates/pages/ is rendered through the shared
base layout, then the static/ tree is mirrored next to the rendered pages.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    select_autoescape,
)

from pages import DEFAULT_PAGES, DiscoveredPage, PageConfig
from server import DEFAULT_HOST, DEFAULT_PORT, ServeError, serve


logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
DIST_DIR = BASE_DIR / "dist"
TEMPLATES_DIR = BASE_DIR / "templates"
PAGES_DIR = TEMPLATES_DIR / "pages"
STATIC_DIR = BASE_DIR / "static"

BASE_TEMPLATE = "base.html"
PAGE_SUFFIX = ".html"

USAGE = """\
Trial and Errror - Template Builder
Used to build the site from templates into the dist/ directory.

Build Process:
1. Checks the page templates and the base layout, then recreates dist/
2. Compiles all HTML templates into dist/
3. Copies all static assets into dist/
4. Serves the site from dist/ directory

Flags:
-serve: Start HTTP server after building (serves from dist/)
-port: Provide port for HTTP server (default: 8000)"""


class SiteBuildError(Exception):
    """The build cannot go on at all."""


class PageBuildError(Exception):
    """A single page failed; the rest of the build continues."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class AssetCopyError(Exception):
    """Mirroring static/ into the output directory failed."""


@dataclass(frozen=True)
class SiteLayout:
    templates_dir: Path
    pages_dir: Path
    static_dir: Path
    dist_dir: Path

    @classmethod
    def from_root(cls, root: Path) -> SiteLayout:
        root = Path(root)
        return cls(
            templates_dir=root / "templates",
            pages_dir=root / "templates" / "pages",
            static_dir=root / "static",
            dist_dir=root / "dist",
        )

    @property
    def base_template(self) -> Path:
        return self.templates_dir / BASE_TEMPLATE


DEFAULT_LAYOUT = SiteLayout(
    templates_dir=TEMPLATES_DIR,
    pages_dir=PAGES_DIR,
    static_dir=STATIC_DIR,
    dist_dir=DIST_DIR,
)


@dataclass(frozen=True)
class ComposedPage:
    page: DiscoveredPage
    environment: Environment
    template: Template
    components: tuple[str, ...] = ()


@dataclass
class BuildReport:
    rendered: list[Path] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    assets_copied: bool = False

    @property
    def ok(self) -> bool:
        return not self.skipped and self.assets_copied


def _url_for_static(endpoint: str, *, filename: str) -> str:
    """Minimal `url_for` replacement that only understands the static endpoint."""
    if endpoint != "static":
        msg = "Only the 'static' endpoint is supported when exporting."
        raise ValueError(msg)
    # static/ is mirrored into the root of the output directory.
    return f"./{filename}"


def discover_pages(
    pages_dir: Path, registry: Mapping[str, PageConfig]
) -> list[DiscoveredPage]:
    """Match the page templates on disk against the registry.

    Templates without a registry entry are logged and left out; they are never
    rendered with an empty configuration.
    """
    try:
        entries = sorted(Path(pages_dir).iterdir())
    except OSError as exc:
        msg = f"Cannot read pages directory {pages_dir}: {exc}"
        raise SiteBuildError(msg) from exc

    discovered: list[DiscoveredPage] = []
    for entry in entries:
        if entry.is_dir() or entry.suffix != PAGE_SUFFIX:
            continue
        identifier = entry.stem
        config = registry.get(identifier)
        if config is None:
            logger.warning("No configuration found for page %s", identifier)
            continue
        discovered.append(DiscoveredPage(config=config, source=entry))
        logger.info("Discovered page: %s", identifier)
    return discovered


def load_base_layout(path: Path) -> str:
    """Read the base layout once and make sure it parses."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read base template {path}: {exc}"
        raise SiteBuildError(msg) from exc
    try:
        Environment().parse(source, name=BASE_TEMPLATE)
    except TemplateError as exc:
        msg = f"Cannot parse base template {path}: {exc}"
        raise SiteBuildError(msg) from exc
    return source


def _make_environment(templates: dict[str, str], component_dir: Path) -> Environment:
    loaders = [DictLoader(templates)]
    if component_dir.is_dir():
        loaders.append(FileSystemLoader(component_dir))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.globals["url_for"] = _url_for_static
    return env


def compose_page(page: DiscoveredPage, base_source: str) -> ComposedPage:
    """Merge the base layout, the page template and its components.

    Each page gets a fresh environment so nothing defined while composing one
    page leaks into the next.
    """
    identifier = page.identifier
    page_name = page.source.name
    try:
        page_source = page.source.read_text(encoding="utf-8")
    except OSError as exc:
        raise PageBuildError(identifier, f"cannot read page template: {exc}") from exc

    component_dir = page.source.with_suffix("")
    env = _make_environment(
        {BASE_TEMPLATE: base_source, page_name: page_source}, component_dir
    )

    try:
        template = env.get_template(BASE_TEMPLATE)
        env.get_template(page_name)
    except TemplateError as exc:
        raise PageBuildError(identifier, f"cannot parse page template: {exc}") from exc

    components: list[str] = []
    if component_dir.is_dir():
        for component in sorted(component_dir.glob(f"*{PAGE_SUFFIX}")):
            if not component.is_file():
                continue
            if component.name in (BASE_TEMPLATE, page_name):
                raise PageBuildError(
                    identifier, f"component {component.name} shadows a page template"
                )
            try:
                env.get_template(component.name)
            except (OSError, TemplateError) as exc:
                raise PageBuildError(
                    identifier, f"cannot parse component {component.name}: {exc}"
                ) from exc
            components.append(component.name)
        if components:
            logger.info(
                "Added %d component templates for %s", len(components), identifier
            )

    return ComposedPage(
        page=page, environment=env, template=template, components=tuple(components)
    )


def render_page(composed: ComposedPage, output_dir: Path) -> Path:
    page = composed.page
    context = page.config.as_context()
    context["page_template"] = page.source.name
    try:
        rendered = composed.template.render(context)
    except Exception as exc:
        # Globals and filters can raise anything while the template runs.
        raise PageBuildError(page.identifier, f"cannot render template: {exc}") from exc

    output_file = Path(output_dir) / f"{page.identifier}{PAGE_SUFFIX}"
    try:
        output_file.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise PageBuildError(page.identifier, f"cannot write {output_file}: {exc}") from exc
    logger.info("Built %s", output_file)
    return output_file


def copy_static_assets(static_dir: Path, output_dir: Path) -> int:
    """Mirror `static_dir` into `output_dir`, returning the number of files copied."""
    static_dir = Path(static_dir)
    try:
        shutil.copytree(static_dir, output_dir, dirs_exist_ok=True)
    except OSError as exc:
        msg = f"Cannot copy static assets from {static_dir}: {exc}"
        raise AssetCopyError(msg) from exc
    return sum(1 for path in static_dir.rglob("*") if path.is_file())


def build_static_site(
    layout: SiteLayout = DEFAULT_LAYOUT,
    registry: Mapping[str, PageConfig] = DEFAULT_PAGES,
    *,
    clean: bool = True,
) -> BuildReport:
    dist_dir = layout.dist_dir
    discovered = discover_pages(layout.pages_dir, registry)
    base_source = load_base_layout(layout.base_template)

    try:
        if clean and dist_dir.exists():
            shutil.rmtree(dist_dir)
        dist_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Cannot prepare output directory {dist_dir}: {exc}"
        raise SiteBuildError(msg) from exc

    report = BuildReport()
    for page in discovered:
        try:
            composed = compose_page(page, base_source)
            report.rendered.append(render_page(composed, dist_dir))
        except PageBuildError as exc:
            logger.error("Skipping page %s: %s", exc.identifier, exc.reason)
            report.skipped[exc.identifier] = exc.reason

    try:
        copied = copy_static_assets(layout.static_dir, dist_dir)
    except AssetCopyError as exc:
        logger.error("Error copying static assets: %s", exc)
    else:
        report.assets_copied = True
        logger.info("Copied %d static files into %s", copied, dist_dir)

    logger.info("Build complete! Site is ready in %s", dist_dir)
    return report


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="export-static",
        description="Build the site from templates into dist/.",
    )
    parser.add_argument(
        "-serve",
        "--serve",
        action="store_true",
        help="Start HTTP server after building (serves from dist/)",
    )
    parser.add_argument(
        "-port",
        "--port",
        default=None,
        help=f"Port for HTTP server (default: {DEFAULT_PORT})",
    )
    # Stray positionals are ignored; only flags select an action.
    parser.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    return parser


def main(
    argv: Sequence[str] | None = None,
    layout: SiteLayout = DEFAULT_LAYOUT,
    registry: Mapping[str, PageConfig] = DEFAULT_PAGES,
) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_arg_parser().parse_args(argv)
    if not args.serve and args.port is None:
        print(USAGE)
        return 0
    port = args.port or DEFAULT_PORT

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
    )

    try:
        build_static_site(layout, registry)
        print(f"Static build ready in {layout.dist_dir}")
        if args.serve:
            serve(layout.dist_dir, port, host=DEFAULT_HOST)
    except (SiteBuildError, ServeError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
