"""Collect brand media from scraper jobs into one result and archive."""
