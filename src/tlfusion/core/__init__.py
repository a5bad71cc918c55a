"""Core services: errors, logging, clock, settings, case store, workspace."""
