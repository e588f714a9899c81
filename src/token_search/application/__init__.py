"""Application layer - orchestrates adapters and pure processing."""
