"""Resolve featured-image references to locally stored attachments."""
