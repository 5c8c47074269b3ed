"""mdfmt renderers.

Renderers consume the formatting event stream and produce output text.

Available Renderers:
- MarkdownRenderer: Renders events to canonical Markdown

Thread Safety:
Renderer state is local to each render() call.

"""

from mdfmt.renderers.markdown import MarkdownRenderer

__all__ = ["MarkdownRenderer"]
