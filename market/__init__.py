"""Market data: price feed boundary, snapshot cache, and refresh scheduling."""
