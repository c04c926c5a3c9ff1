"""Configuration, logging, error handling and input parsing helpers."""
