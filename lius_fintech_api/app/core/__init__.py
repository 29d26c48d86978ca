"""Configuration, logging, errors, hashing and persistence."""
