"""feedsync - Background synchronization primitives for feed-reader clients."""

__version__ = "0.1.0"
