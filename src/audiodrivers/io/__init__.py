"""Serialization of driver traces."""
