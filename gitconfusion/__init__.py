"""GitConfusion - dependency confusion auditor for GitHub organizations."""

__version__ = "0.1.0"
