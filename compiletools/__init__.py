"""Building blocks for compiler test harnesses: process running, output checks,
normalisation, diffing, command lines and debugger scripts."""

__version__ = "0.1.0"