"""
Portfolio quote refresh: resolve quote URLs, fetch pages, extract prices and
write them into the ledger with a keep-last-good-price policy.
"""
