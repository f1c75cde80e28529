"""Render bookmark descriptions from Markdown to HTML."""
import markdown


def render_markdown(text: str | None) -> str:
    """Render Markdown text to HTML. Empty or missing text renders to an empty string."""
    if not text:
        return ""
    return markdown.markdown(text, extensions=["fenced_code", "tables"])
