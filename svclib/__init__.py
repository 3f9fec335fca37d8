"""
Start services on a target host as a single controlled pipeline step.
"""

__version__ = "1.0.0"
