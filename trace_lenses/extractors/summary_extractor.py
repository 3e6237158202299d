"""
Short human-readable summaries of trace records.
"""

from urllib.parse import urlparse

from ..core.types import RequestTrace, SqlTrace, TraceRecord


class SummaryExtractor:
    """Derives the one-line summary shown on a trace's timeline bar."""

    @staticmethod
    def summarize(record: TraceRecord) -> str:
        """
        Summarize a trace record.

        Args:
            record: Any trace record

        Returns:
            "METHOD /path" for requests, the leading SQL keyword for SQL
            traces and a generic notice for unknown kinds
        """
        if isinstance(record, RequestTrace):
            return SummaryExtractor.summarize_request(record)
        if isinstance(record, SqlTrace):
            return SummaryExtractor.summarize_sql(record)
        return f"Unknown trace type {record.kind}"

    @staticmethod
    def summarize_request(record: RequestTrace) -> str:
        method = record.request.method if record.request else ''
        url = record.request.url if record.request else ''
        return f"{method} {SummaryExtractor.extract_request_path(url)}".strip()

    @staticmethod
    def extract_request_path(url: str) -> str:
        """
        Extract the path component of a request URL.

        Args:
            url: Absolute or relative URL

        Returns:
            URL path, '/' for a bare host, or empty string if url is empty
        """
        if not url:
            return ''
        path = urlparse(url).path
        if not path and '://' in url:
            return '/'
        return path

    @staticmethod
    def summarize_sql(record: SqlTrace) -> str:
        words = record.sql.split(None, 1)
        return words[0] if words else ''
