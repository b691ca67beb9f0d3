"""Core data, configuration, randomness and events shared by every game system."""
