"""LeakProbe: discover exposed files on a web origin and scan them for leaked secrets and endpoints."""

__version__ = "1.0.0"
