"""
HTTP shell for the marketing console.
"""
