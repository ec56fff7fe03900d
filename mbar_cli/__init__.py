"""Media by aspect ratio: measure images and filter a media library by shape."""

__version__ = "1.0.0"
