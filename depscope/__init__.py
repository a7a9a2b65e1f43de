"""depscope — npm dependency graphs and scorecard trust scores from deps.dev."""

__version__ = "0.1.0"
