"""Fixed HTML fragments used when no text generation takes place."""

from __future__ import annotations

from jinja2 import Environment

_ENV = Environment(autoescape=True, keep_trailing_newline=False)

_NO_COMMITS_TEMPLATE = _ENV.from_string(
    '<div style="font-family: -apple-system, BlinkMacSystemFont, \'Segoe UI\', Roboto, sans-serif; '
    'max-width: 900px; margin: 0 auto; padding: 20px;">'
    '<h1 style="color: #667eea; margin-bottom: 10px; font-size: 2em;">Project Update: {{ name }}</h1>'
    '<p style="color: #666; font-size: 1.1em;">'
    "No commits found for {{ name }} between {{ start_date }} and {{ end_date }}."
    "</p></div>"
)

_REPORT_TEMPLATE = _ENV.from_string(
    "<!DOCTYPE html>\n"
    '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
    "<title>Progress report {{ start_date }} to {{ end_date }}</title>\n"
    "</head>\n<body>\n"
    "{% if overview %}<section class=\"overview\">\n{{ overview | safe }}\n</section>\n<hr>\n{% endif %}"
    "{% for summary in summaries %}"
    '<section class="repo" data-repo="{{ summary.repo_name }}" data-commits="{{ summary.commit_count }}">\n'
    "{{ summary.summary_html | safe }}\n</section>\n"
    "{% endfor %}"
    "</body>\n</html>\n"
)


def build_no_commits_fragment(name: str, start_date: str, end_date: str) -> str:
    """Return the fragment shown for a repository without commits in range."""
    return _NO_COMMITS_TEMPLATE.render(name=name, start_date=start_date, end_date=end_date)


def build_report_document(response, start_date: str, end_date: str) -> str:
    """Wrap the generated fragments of a report response in a standalone page."""
    overview = response.overview.html if response.overview is not None else None
    return _REPORT_TEMPLATE.render(
        overview=overview,
        summaries=response.summaries,
        start_date=start_date,
        end_date=end_date,
    )


__all__ = ["build_no_commits_fragment", "build_report_document"]
