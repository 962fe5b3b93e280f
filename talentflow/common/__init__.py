"""
Common utilities shared by the assessment core, the stores and the API.
"""
