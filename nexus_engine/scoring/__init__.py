"""
scoring/ — Composite index engine

Modules:
    utils.py               - Decimal / clamping helpers
    random_source.py       - Seedable numpy Generator factory
    normalizer.py          - Parameter Normalizer (raw mapping → typed input)
    recommendations.py     - Declarative threshold rules per calculator
    rci_calculator.py      - Regional Competitiveness Index
    roi_calculator.py      - ROI / NPV / payback
    tpp_calculator.py      - Time-to-Profit with projections
    seam_calculator.py     - Ecosystem synergy (deterministic or illustrative)
    risk_calculator.py     - Risk Index
    monte_carlo.py         - Monte Carlo NPV sensitivity
    factor_indices.py      - Deal success, trust, investment attraction
    competition.py         - Competition analysis
    regional_analysis.py   - Comprehensive regional, cost-benefit, partnership viability
    calculator_suite.py    - Settings-driven construction and dispatch
"""
