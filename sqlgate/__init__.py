"""
sqlgate – split, vet and run untrusted multi‑statement SQL scripts.
"""
__version__ = "0.3.0"
