"""Multi-location inventory tracker."""

__version__ = "0.1.0"
