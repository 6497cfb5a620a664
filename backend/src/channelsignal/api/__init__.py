"""HTTP API for ChannelSignal."""
