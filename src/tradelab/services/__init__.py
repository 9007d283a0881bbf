"""Simulation services."""
