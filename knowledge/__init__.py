"""
Growth engine knowledge base.

Contains reference data as static assets:
- CDC 2000 LMS growth chart parameters
- BMI category thresholds and guidance text
"""
