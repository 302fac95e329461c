"""Core services and settings for rolekeeper."""
