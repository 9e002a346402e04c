"""Error formatting utilities."""


# Checked in order against the lower-cased error text
_SUGGESTIONS = (
    ("browser not launched",
     "Call browser_launch first."),
    ("err_aborted",
     "The navigation was aborted. The main tab stops article links; use "
     "resolve_article for articles and open the resolved URL instead."),
    ("invalid url",
     "Pass a full http(s) URL, including the scheme."),
    ("validation error",
     "Check the tool arguments against the schema; timeout_seconds must be > 0."),
    ("timeout",
     "The page took too long to load. Try again, or raise timeout_seconds "
     "for resolve_article."),
    ("err_name_not_resolved",
     "A mirror host could not be reached. Check your connection; the "
     "resolver falls back on its own, so retrying usually helps."),
    ("target page, context or browser has been closed",
     "The browser was closed underneath the tool. Call browser_launch again."),
)


def format_error(tool_name: str, error: Exception, suggestion: str = "") -> str:
    """Format an error message for MCP tool response."""
    error_msg = f"## ❌ Error in {tool_name}\n\n"
    error_msg += f"**Error:** {str(error)}\n\n"

    if not suggestion:
        error_str = str(error).lower()
        suggestion = next(
            (text for needle, text in _SUGGESTIONS if needle in error_str),
            "Please check the error message and try again with different parameters.",
        )
    error_msg += f"**Suggestion:** {suggestion}\n"

    return error_msg
