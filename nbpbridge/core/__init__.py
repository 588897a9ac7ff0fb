"""Core bridge components."""
