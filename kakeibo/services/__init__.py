"""Services package: job store, accounts, transactions, rules, encryption, and scrape orchestration."""
