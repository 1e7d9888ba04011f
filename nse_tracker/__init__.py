"""NSE market snapshot tracker.

Polls the NSE equity snapshot endpoint on a jittered cadence and republishes
normalized :class:`~nse_tracker.data_feed.stocks.StockRecord` batches to
in-process and WebSocket subscribers.
"""

__version__ = "0.1.0"
