"""kakeibo-sync: household ledger with background bank scraping and transaction classification."""
