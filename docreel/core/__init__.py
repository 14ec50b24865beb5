"""Core infrastructure: config, logging, exceptions, state machine, DI."""
