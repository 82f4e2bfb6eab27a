"""
Applicant Ranking CLI entry point.

Usage:
    python -m applicant_ranking.cli rank
    python -m applicant_ranking.cli rank --applicants applicants.json --scholarship scholarship.json
    python -m applicant_ranking.cli explain <id>
    python -m applicant_ranking.cli policy
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
