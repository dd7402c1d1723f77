"""
Search Insight Engine

Turns search-performance telemetry into an AI-assisted report model:
1. Normalizes raw provider payloads (Search Console, trends, competitors)
2. Merges them into one dataset and derives trend/opportunity signals
3. Builds the analysis prompt for Claude
4. Reconciles the model reply into a typed insight record for reporting
"""

__version__ = "0.1.0"
