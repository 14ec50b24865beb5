"""DocReel: segment approval and assembly-request engine for narrated videos."""

__version__ = "0.1.0"
