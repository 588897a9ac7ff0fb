"""Bridge between a Nest-style HVAC backplate and a ZeroMQ message bus."""

__version__ = "0.1.0"
