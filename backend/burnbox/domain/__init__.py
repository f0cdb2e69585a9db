"""
BurnBox Domain Layer

Pure business rules for burn records, quotas, audit and blob storage contracts.
"""
