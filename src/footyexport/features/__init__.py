"""
Feature engineering for FootyExport.

- `feature_builder` computes rolling club form, table features and labels and
  splits them into training and test rows.
"""
