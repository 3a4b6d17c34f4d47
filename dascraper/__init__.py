"""Extract development applications from council register PDFs."""

__version__ = "0.1.0"
