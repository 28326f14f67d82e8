"""
Page registry: the display metadata for every page the site knows about.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class PageConfig:
    identifier: str
    title: str
    description: str
    css: str
    active_nav: str = ""

    def as_context(self) -> dict[str, Any]:
        """Template variables for this page."""
        return {
            "title": self.title,
            "description": self.description,
            "css": self.css,
            "active_nav": self.active_nav,
            "page_name": self.identifier,
        }


@dataclass(frozen=True)
class DiscoveredPage:
    """A registered page whose template was found on disk."""

    config: PageConfig
    source: Path

    @property
    def identifier(self) -> str:
        return self.config.identifier


def make_registry(configs: Iterable[PageConfig]) -> Mapping[str, PageConfig]:
    registry: dict[str, PageConfig] = {}
    for config in configs:
        if config.identifier in registry:
            msg = f"Duplicate page identifier: {config.identifier!r}"
            raise ValueError(msg)
        registry[config.identifier] = config
    return MappingProxyType(registry)


DEFAULT_PAGES = make_registry(
    [
        PageConfig(
            identifier="index",
            title="Trial and Errror - Home",
            description=(
                "Trial and Errror - Web Development, Technical Consulting, and Video "
                "Content Development. Learn about our services and projects."
            ),
            css="index",
        ),
        PageConfig(
            identifier="about",
            title="Trial and Errror - About",
            description=(
                "About Trial and Errror - Learn about our web development services, "
                "technical consulting, and educational video content. Founded on the "
                "principle that everyone makes mistakes."
            ),
            css="about",
            active_nav="about",
        ),
        PageConfig(
            identifier="projects",
            title="Trial and Errror - Projects",
            description=(
                "Projects by Trial and Errror - View our professional web applications, "
                "personal projects, and portfolio of work in web development and technology."
            ),
            css="projects",
            active_nav="projects",
        ),
        PageConfig(
            identifier="wade",
            title="Trial and Errror - Meet Wade",
            description=(
                "Meet Wade Green - Software Engineer, Attorney at Law, and Technology "
                "Educator. View Wade's professional experience, skills, and background."
            ),
            css="wade",
            active_nav="wade",
        ),
    ]
)
