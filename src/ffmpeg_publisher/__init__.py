"""Build FFmpeg and publish the resulting archive to a WordPress site."""

__version__ = "0.1.0"
