"""Device and message-bus transports."""
