"""ChannelSignal - inbound email ingestion for sales teams."""

__version__ = "0.1.0"
