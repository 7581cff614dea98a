"""URL extraction from Slack message text."""

import re

# Slack mrkdwn link: <https://example.com> or <https://example.com|label>.
# Does NOT match user refs <@U123>, channel refs <#C123>, or special mentions <!here>.
# Second alternative picks up bare URLs pasted without markup.
URL_PATTERN = re.compile(r"<(https?://[^|>\s]+)(?:\|[^>]*)?>|(https?://[^\s<>|]+)")

# Sentence punctuation that commonly trails a bare URL but is not part of it
_TRAILING_PUNCTUATION = ".,;:!?)]}'\""


def _clean(url: str) -> str:
    # Slack escapes & as &amp; inside message text
    return url.replace("&amp;", "&")


def extract_links(text: str) -> list[str]:
    """Return every URL in the text in order of appearance, without duplicates.

    Handles ``<url>``, ``<url|label>`` and bare ``https://...`` forms.
    """
    links: list[str] = []
    for match in URL_PATTERN.finditer(text):
        wrapped, bare = match.groups()
        url = wrapped if wrapped is not None else bare.rstrip(_TRAILING_PUNCTUATION)
        url = _clean(url)
        if url and url not in links:
            links.append(url)
    return links
