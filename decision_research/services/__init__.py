"""External services and evidence gates."""
