"""
Business health / valuation scoring.

Modules
-------
utils          : clamp(), normalize_to_score(), shrink_toward_neutral().
financial      : Financial category signals (margins, debt, cash flow, turnover).
growth         : Growth category signals (stated growth, statements, history).
operational    : Operational category signals (maturity, staff, schedule).
sale_readiness : Documentation completeness and valuation reasonableness.
confidence     : Data-consistency checks and the overall confidence level.
trajectory     : Improving / stable / declining classification from history.
scorer         : compute_health_score() — assembles a HealthScore.
insights       : generate_health_insights() — strengths, weaknesses, actions.
"""
