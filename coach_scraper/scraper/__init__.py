# coach_scraper/scraper/__init__.py
"""Marketplace scraping pipeline: index -> dedup -> detail -> persist."""
