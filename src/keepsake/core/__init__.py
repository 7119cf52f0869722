"""Core subsystems: configuration, logging, events, history loading and retention."""
