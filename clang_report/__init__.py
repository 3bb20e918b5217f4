"""Run the clang static analyzer over an Xcode build and summarize the findings."""

__version__ = "0.1.0"
