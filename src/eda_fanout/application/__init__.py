"""Application – fan-out topic, event source bridge, batch consumers and pipeline wiring."""
