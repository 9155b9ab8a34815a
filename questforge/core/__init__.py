"""Engine infrastructure: configuration, logging, events and infrastructure errors."""
