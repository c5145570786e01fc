"""Read-only HTML preview of body text; never feeds back into a session"""

from functools import lru_cache
from typing import Optional

from markdown_it import MarkdownIt

from mdpost.core.bridge.images import DEFAULT_IMAGE_ROUTE, resolve_display_src
from mdpost.core.frontmatter import parse_document
from mdpost.core.models import RenderedDocument


DEFAULT_PRESET = 'gfm-like'


@lru_cache(maxsize=4)
def _make_renderer(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance that escapes raw HTML and rewrites document-relative images.

    With html disabled, script tags and event-handler attributes in the body come
    out as escaped text; markdown-it's link validation drops javascript:/vbscript:/
    file:/data: targets.
    """
    md = MarkdownIt(preset, options_update={"html": False, "linkify": False})
    default_image = md.renderer.rules["image"]

    def render_image(tokens, idx, options, env):
        token = tokens[idx]
        display = resolve_display_src(
            token.attrGet("src") or "",
            env.get("image_context_path"),
            env.get("image_route", DEFAULT_IMAGE_ROUTE),
        )
        if display:
            token.attrSet("src", display)
        return default_image(tokens, idx, options, env)

    md.renderer.rules["image"] = render_image
    return md


def render(
    body_text: str,
    image_context_path: Optional[str] = None,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    preset: str = DEFAULT_PRESET,
    ) -> str:
    """Render body text to a sanitized HTML fragment."""
    if not body_text.strip():
        return ""
    env = {"image_context_path": image_context_path, "image_route": image_route}
    return _make_renderer(preset).render(body_text, env)


def render_document(
    stored_text: str,
    image_context_path: Optional[str] = None,
    image_route: str = DEFAULT_IMAGE_ROUTE,
    preset: str = DEFAULT_PRESET,
    ) -> RenderedDocument:
    """Split frontmatter from stored text and render only the body."""
    parsed = parse_document(stored_text)
    html = render(parsed.body, image_context_path, image_route, preset)
    return RenderedDocument(html=html, metadata=parsed.metadata)
