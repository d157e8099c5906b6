"""
Core services shared by the coverage pipeline: logging setup and
operation timing.
"""
