"""Slingshot: Google Analytics 4 and Search Console dashboard API."""

__version__ = "0.1.0"
