"""
Time range resolution, the data-constrained picker and error types.
"""
