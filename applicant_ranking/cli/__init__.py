# CLI package for the Applicant Ranking Engine
"""
Read-only CLI interface for ranking applicants locally.

Commands:
    applicant-rank rank     — Rank applicants for a scholarship
    applicant-rank explain  — Show explanation for an applicant
    applicant-rank policy   — Show the active weights and bonuses
"""
