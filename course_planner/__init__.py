"""Course curriculum fetcher and study schedule planner."""

__version__ = "0.1.0"
