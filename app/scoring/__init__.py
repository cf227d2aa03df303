"""
scoring/ - Lead-Gen Maturity Scoring Engine

Modules:
    utils.py                  - Decimal utilities (half-up rounding, weighted mean)
    lever_tables.py           - Lever/module weight tables and ScoringConfig
    responses.py              - ResponseDocument, LeverResponse, UNANSWERED
    module_scorer.py          - Module Scorer (coverage/weighted blend)
    overall_aggregator.py     - Overall score and outcome band
    gap_ranker.py             - Gap/Impact ranking and advisory rules
    confidence_estimator.py   - Data-sufficiency confidence rating
    integration_service.py    - Full engine pass + deterministic fallback levers
"""
