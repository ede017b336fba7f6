"""Write Out Loud: account and session core for handwriting practice."""
