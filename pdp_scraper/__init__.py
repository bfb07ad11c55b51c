"""PDP scraper package."""
