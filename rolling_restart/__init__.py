""" Zero-downtime rolling restarts for Cloud Foundry applications
"""

__version__ = "1.0.0"
