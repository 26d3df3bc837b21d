"""Simulation, summarization and solving primitives."""
