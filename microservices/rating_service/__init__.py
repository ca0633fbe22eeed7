"""
Rating Service

Usage rating and charge calculation engine for wholesale telecom settlement.

Features:
- Usage record validation (VOICE duration, SMS event count)
- Partner eligibility (ACTIVE partners only)
- Effective-dated rate tables with longest-prefix pricing rules
- Minute rounding, minimum charges and 4-decimal amounts
- Batch rating with statistics and per-currency revenue
"""

__version__ = "1.0.0"
