"""
Timeline normalization for trace records.
"""

from typing import List, Sequence

from ..core.types import TimelineSpan, TimelineWindow, TraceRecord


class TimelineNormalizer:
    """Computes where each trace sits on a test's timeline, in percent."""

    @staticmethod
    def is_timestamped(records: Sequence[TraceRecord]) -> bool:
        """Wall-clock positions are used only when every record has a start time."""
        return bool(records) and all(r.start_ms is not None for r in records)

    @staticmethod
    def compute_window(records: Sequence[TraceRecord]) -> TimelineWindow:
        """
        Compute the duration that trace positions are relative to.

        With timestamps the window runs from the earliest start to the latest
        end. Without them it is the sum of all elapsed times, since traces
        recorded without a start cannot be placed relative to each other.

        Args:
            records: Trace records of one test

        Returns:
            TimelineWindow; duration is 0 for an empty record list
        """
        if not records:
            return TimelineWindow(window_start_ms=None, duration_ms=0.0, timestamped=False)

        if TimelineNormalizer.is_timestamped(records):
            window_start = min(r.start_ms for r in records)
            window_end = max(r.start_ms + r.elapsed_ms for r in records)
            return TimelineWindow(
                window_start_ms=window_start,
                duration_ms=window_end - window_start,
                timestamped=True
            )

        return TimelineWindow(
            window_start_ms=None,
            duration_ms=float(sum(r.elapsed_ms for r in records)),
            timestamped=False
        )

    @staticmethod
    def _percent(value_ms: float, duration_ms: float) -> float:
        if duration_ms <= 0:
            return 0.0
        return value_ms / duration_ms * 100

    @staticmethod
    def span_for(record: TraceRecord, window: TimelineWindow) -> TimelineSpan:
        """
        Position one record within a window.

        Values are not clamped to [0, 100].

        Args:
            record: Trace record
            window: Window computed for the record's test

        Returns:
            TimelineSpan with start and end percentages
        """
        if window.timestamped:
            offset = record.start_ms - window.window_start_ms
            return TimelineSpan(
                start_percent=TimelineNormalizer._percent(offset, window.duration_ms),
                end_percent=TimelineNormalizer._percent(offset + record.elapsed_ms, window.duration_ms)
            )
        # Untimestamped traces are independent shares of the total, not offsets
        return TimelineSpan(
            start_percent=0.0,
            end_percent=TimelineNormalizer._percent(record.elapsed_ms, window.duration_ms)
        )

    @staticmethod
    def normalize(records: Sequence[TraceRecord]) -> List[TimelineSpan]:
        """
        Compute timeline spans for records, paired positionally with the input.

        Args:
            records: Trace records of one test

        Returns:
            List of TimelineSpan objects
        """
        window = TimelineNormalizer.compute_window(records)
        return [TimelineNormalizer.span_for(record, window) for record in records]
