"""rNews: fetch news from RSS feeds and hot lists, push Markdown digests to chat webhooks."""

__version__ = "1.0.0"
