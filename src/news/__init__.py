"""
News Module
===========

Technology news and community tips, grouped by region category:
- Category table with display metadata and upstream queries
- Source adapters for the news search API and the tips site
- Classification and keyword filtering
- Scheduled and on-demand ingestion runs
- Read-only paginated query services
"""
