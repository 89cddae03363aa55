"""Business services: currency rules, split allocation, validation, balances and storage."""
