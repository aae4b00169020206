"""Infrastructure: configuration, logging, events, persistence, wiring."""
