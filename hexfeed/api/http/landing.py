"""Landing page rendering: built once at startup and served read-only."""

from __future__ import annotations

from html import escape

from datastar_py import action_generator as action
from datastar_py import attribute_generator as data

from hexfeed.feed.encoder import FEED_ELEMENT_ID

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
	<meta name="viewport" content="width=device-width, initial-scale=1, maximum-scale=1, user-scalable=0" />
	<script type="module" defer src="{script_url}"></script>
	<style>
		*, *::before, *::after {{
			box-sizing: border-box;
		}}

		* {{
			margin: 0;
		}}

		:root {{
			--bg-color: oklch(92.2% 0 0);
		}}

		@media (prefers-color-scheme: dark) {{
			:root {{
				--bg-color: oklch(25.3267% 0.015896 252.417568);
			}}
		}}

		body {{
			align-items: center;
			background-color: var(--bg-color);
			display: flex;
			flex-direction: column;
			font-family: ui-sans-serif, system-ui, sans-serif, 'Apple Color Emoji', 'Segoe UI Emoji', 'Segoe UI Symbol', 'Noto Color Emoji';
			height: 100vh;
			justify-content: center;
		}}
	</style>
</head>
<body>
	<span id="{element_id}" {subscribe}></span>
</body>
</html>
"""


def render_page(*, script_url: str, stream_path: str) -> bytes:
    """Render the landing page bytes; the result is shared by every request."""
    html = _PAGE_TEMPLATE.format(
        script_url=escape(script_url, quote=True),
        element_id=FEED_ELEMENT_ID,
        subscribe=data.on("load", action.get(stream_path)),
    )
    return html.encode("utf-8")


