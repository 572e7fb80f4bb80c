"""
Keyword Opportunity Engine

Finds SEO keyword opportunities for a B2B software vendor:
1. Collects keyword data from the Ahrefs API (competitor or topic driven)
2. Classifies keywords with pattern tables or Claude AI
3. Scores, rank-checks and estimates revenue per keyword
4. Serves ranked opportunities through a polling job API
"""

__version__ = "1.0.0"
