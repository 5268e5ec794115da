"""
Exemplar-based listing grader.
Batch pass: corpus -> exemplars -> benchmarks -> category rules.
Online pass: candidate listing + category rules -> grade.
"""
