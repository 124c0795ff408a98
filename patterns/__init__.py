"""Reusable patterns behind the task tracker.

Each module is a self-contained pattern the tasks vertical builds on:
workflow status policy, single-writer snapshot repository, and domain
configuration.
"""
