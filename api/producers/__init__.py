"""
Producer win-interval queries.
"""
