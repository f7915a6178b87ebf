# models/__init__.py
"""
Regression models for greenhouse quantum yield.

Contains:
- Design-matrix construction and seeded train/test splitting
- Ordinary least squares with k-fold cross-validation
- Elastic net tuned by grid search or Bayesian search
- Metric collection and artifact persistence
"""
