"""Uniform admin API: approval workflow and design-task state machine."""
