"""article-guard test suite."""
