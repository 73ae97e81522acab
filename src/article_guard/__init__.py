"""article-guard -- compliance and quality scoring for supplement ingredient articles."""

__version__ = "0.1.0"
