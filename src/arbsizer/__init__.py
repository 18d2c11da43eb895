"""Market-neutral trade volume sizing for two-venue arbitrage."""
