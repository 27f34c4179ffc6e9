"""dev-analyzer - frontend dev-server build log analyzer."""

__version__ = "0.3.0"
