"""
Shared reconciliation layer and plumbing for the café admin console.
"""
