# Ranking package for the Applicant Ranking Engine
"""
Deterministic applicant ranking modules.

Provides explainable scoring where every component is
decomposable into human-readable reasons.
"""
