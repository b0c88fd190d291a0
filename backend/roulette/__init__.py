"""Liquidation Roulette round ledger and settlement service."""
